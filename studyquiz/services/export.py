"""Full per-owner data export."""
import enum
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from studyquiz.core.clock import as_utc, resolve_now
from studyquiz.core.database import storage_operation
from studyquiz.models.orm import Document, Feedback, Question, QuizSession


def _row(obj: Any) -> Dict[str, Any]:
    """Column values of an ORM row, JSON-ready."""
    out = {}
    for column in obj.__table__.columns:
        value = getattr(obj, column.key)
        if isinstance(value, datetime):
            value = as_utc(value).isoformat()
        elif isinstance(value, enum.Enum):
            value = value.value
        out[column.key] = value
    return out


def export_owner_data(db: Session, owner_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    with storage_operation(db, "Failed to export data"):
        documents = db.scalars(select(Document).where(Document.user_id == owner_id)).all()
        questions = db.scalars(select(Question).where(Question.user_id == owner_id)).all()
        sessions = db.scalars(
            select(QuizSession)
            .options(selectinload(QuizSession.responses))
            .where(QuizSession.user_id == owner_id)
        ).all()
        feedback = db.scalars(select(Feedback).where(Feedback.user_id == owner_id)).all()

        return {
            "user": {"id": owner_id},
            "documents": [_row(d) for d in documents],
            "questions": [_row(q) for q in questions],
            "quiz_sessions": [
                {**_row(s), "quiz_responses": [_row(r) for r in s.responses]} for s in sessions
            ],
            "feedback": [_row(f) for f in feedback],
            "exported_at": resolve_now(now).isoformat(),
        }
