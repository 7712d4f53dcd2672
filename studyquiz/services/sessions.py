"""
Quiz session creation.

A session is bound to a fixed question subset at start time: one
``QuizResponse`` slot is written per selected question in the same
transaction as the session row, so ``len(session.responses)`` always equals
``session.total_questions``.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from studyquiz.core.clock import resolve_now
from studyquiz.core.config import settings
from studyquiz.core.database import storage_operation
from studyquiz.core.errors import NotFoundError, ValidationError
from studyquiz.models.orm import (
    Difficulty, Question, QuestionType, QuizResponse, QuizSession, SessionStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class QuestionView:
    """Question as shown while a quiz is running: no answer, no explanation."""
    id: str
    question: str
    type: QuestionType
    options: List[str]
    topic: str
    difficulty: Difficulty

    @classmethod
    def from_question(cls, q: Question) -> "QuestionView":
        return cls(id=q.id, question=q.question, type=q.type, options=list(q.options or []),
                   topic=q.topic, difficulty=q.difficulty)


@dataclass
class StartedSession:
    session_id: str
    questions: List[QuestionView] = field(default_factory=list)


def select_questions(
    db: Session,
    owner_id: str,
    question_count: int,
    document_id: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    question_types: Sequence[QuestionType] = (),
) -> List[Question]:
    """Newest-first slice of the owner's question pool after filtering."""
    stmt = select(Question).where(Question.user_id == owner_id)
    if document_id:
        stmt = stmt.where(Question.document_id == document_id)
    if difficulty:
        stmt = stmt.where(Question.difficulty == difficulty)
    if question_types:
        stmt = stmt.where(Question.type.in_(list(question_types)))
    stmt = stmt.order_by(Question.created_at.desc(), Question.id.desc()).limit(question_count)
    return list(db.scalars(stmt).all())


def start_session(
    db: Session,
    owner_id: str,
    question_count: int,
    document_id: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    question_types: Sequence[QuestionType] = (),
    session_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> StartedSession:
    if question_count < 1:
        raise ValidationError("questionCount must be at least 1")
    if question_count > settings.MAX_QUESTION_COUNT:
        logger.debug("Clamping questionCount %d to %d", question_count, settings.MAX_QUESTION_COUNT)
        question_count = settings.MAX_QUESTION_COUNT

    with storage_operation(db, "Failed to fetch questions"):
        questions = select_questions(db, owner_id, question_count, document_id, difficulty, question_types)
    if not questions:
        raise NotFoundError("No questions found")

    with storage_operation(db, "Failed to create quiz session"):
        session = QuizSession(
            user_id=owner_id,
            document_id=document_id,
            session_name=session_name,
            total_questions=len(questions),
            status=SessionStatus.IN_PROGRESS,
            started_at=resolve_now(now),
        )
        session.responses = [
            QuizResponse(question_id=q.id, user_id=owner_id, position=i)
            for i, q in enumerate(questions)
        ]
        db.add(session)
        db.commit()

    logger.info("Started quiz session %s for %s with %d questions", session.id, owner_id, len(questions))
    return StartedSession(session_id=session.id, questions=[QuestionView.from_question(q) for q in questions])


def list_sessions(db: Session, owner_id: str) -> List[QuizSession]:
    with storage_operation(db, "Failed to fetch quiz sessions"):
        stmt = (
            select(QuizSession)
            .where(QuizSession.user_id == owner_id)
            .order_by(QuizSession.started_at.desc())
        )
        return list(db.scalars(stmt).all())
