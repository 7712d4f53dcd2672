import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from studyquiz.core.clock import resolve_now
from studyquiz.core.database import storage_operation
from studyquiz.core.errors import NotFoundError
from studyquiz.models.orm import QuizResponse
from studyquiz.services.question_store import get_owned_question

logger = logging.getLogger(__name__)


@dataclass
class AnswerResult:
    is_correct: bool
    correct_answer: str


def answers_match(answer: str, correct_answer: str) -> bool:
    """Exact match after trimming and case folding; no partial credit for any type."""
    return answer.strip().casefold() == correct_answer.strip().casefold()


def submit_answer(
    db: Session,
    owner_id: str,
    session_id: str,
    question_id: str,
    answer: str,
    now: Optional[datetime] = None,
) -> AnswerResult:
    """
    Fill the pre-allocated response slot for (session, question, owner).

    Resubmitting overwrites the slot (last write wins). A question that was
    never assigned to the session has no slot and yields ``NotFoundError``.
    """
    with storage_operation(db, "Failed to save answer"):
        question = get_owned_question(db, owner_id, question_id)

        response = db.scalar(
            select(QuizResponse).where(
                QuizResponse.session_id == session_id,
                QuizResponse.question_id == question_id,
                QuizResponse.user_id == owner_id,
            )
        )
        if response is None:
            raise NotFoundError("Question is not part of this quiz session")

        is_correct = answers_match(answer, question.correct_answer)
        response.user_answer = answer
        response.is_correct = is_correct
        response.answered_at = resolve_now(now)
        db.commit()

    logger.debug("Answer recorded for session %s question %s correct=%s", session_id, question_id, is_correct)
    return AnswerResult(is_correct=is_correct, correct_answer=question.correct_answer)
