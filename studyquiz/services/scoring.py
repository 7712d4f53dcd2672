"""
Session completion and scoring.

Completion reads every response slot (answered or not), scores the session and
only then joins in the correct answers and explanations for review. Calling it
again recomputes from the current slots and overwrites the stored score.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from studyquiz.core.clock import resolve_now
from studyquiz.core.database import storage_operation
from studyquiz.core.errors import NotFoundError
from studyquiz.models.orm import Difficulty, QuizResponse, QuizSession, SessionStatus

logger = logging.getLogger(__name__)


@dataclass
class ReviewItem:
    question: str
    user_answer: Optional[str]
    correct_answer: str
    is_correct: Optional[bool]
    explanation: str
    topic: str
    difficulty: Difficulty


@dataclass
class SessionResult:
    score: int
    total_questions: int
    correct_answers: int
    responses: List[ReviewItem] = field(default_factory=list)


def compute_score(correct_answers: int, total_questions: int) -> int:
    """Integer percent, rounded half up; an empty session scores 0."""
    if total_questions <= 0:
        return 0
    return (correct_answers * 200 + total_questions) // (2 * total_questions)


def complete_session(
    db: Session,
    owner_id: str,
    session_id: str,
    now: Optional[datetime] = None,
) -> SessionResult:
    with storage_operation(db, "Failed to complete session"):
        # row lock where the backend supports it
        session = db.scalar(
            select(QuizSession)
            .where(QuizSession.id == session_id, QuizSession.user_id == owner_id)
            .with_for_update()
        )
        if session is None:
            raise NotFoundError("Quiz session not found")

        responses = db.scalars(
            select(QuizResponse)
            .options(joinedload(QuizResponse.question))
            .where(QuizResponse.session_id == session_id, QuizResponse.user_id == owner_id)
            .order_by(QuizResponse.position)
        ).all()

        total_questions = len(responses)
        correct_answers = sum(1 for r in responses if r.is_correct)
        score = compute_score(correct_answers, total_questions)

        session.status = SessionStatus.COMPLETED
        session.score = score
        session.completed_at = resolve_now(now)
        db.commit()

    logger.info("Completed quiz session %s: %d/%d (%d%%)", session_id, correct_answers, total_questions, score)
    review = [
        ReviewItem(
            question=r.question.question,
            user_answer=r.user_answer,
            correct_answer=r.question.correct_answer,
            is_correct=r.is_correct,
            explanation=r.question.explanation,
            topic=r.question.topic,
            difficulty=r.question.difficulty,
        )
        for r in responses
    ]
    return SessionResult(score=score, total_questions=total_questions,
                         correct_answers=correct_answers, responses=review)
