import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from studyquiz.core.database import storage_operation
from studyquiz.core.errors import ValidationError
from studyquiz.models.orm import Feedback
from studyquiz.services.question_store import get_owned_question

logger = logging.getLogger(__name__)


def submit_feedback(
    db: Session,
    owner_id: str,
    question_id: str,
    feedback_type: str,
    rating: Optional[int] = None,
    comment: Optional[str] = None,
) -> Feedback:
    if not feedback_type.strip():
        raise ValidationError("feedbackType is required")
    if rating is not None and not 1 <= rating <= 5:
        raise ValidationError("rating must be between 1 and 5")

    with storage_operation(db, "Failed to save feedback"):
        question = get_owned_question(db, owner_id, question_id)
        fb = Feedback(user_id=owner_id, question_id=question.id, feedback_type=feedback_type.strip(),
                      rating=rating, comment=comment)
        db.add(fb)
        db.commit()
    logger.info("Feedback %s recorded on question %s", fb.id, question_id)
    return fb


def list_feedback(db: Session, owner_id: str, question_id: Optional[str] = None) -> List[Feedback]:
    with storage_operation(db, "Failed to fetch feedback"):
        stmt = (
            select(Feedback)
            .options(joinedload(Feedback.question))
            .where(Feedback.user_id == owner_id)
            .order_by(Feedback.created_at.desc())
        )
        if question_id:
            stmt = stmt.where(Feedback.question_id == question_id)
        return list(db.scalars(stmt).all())
