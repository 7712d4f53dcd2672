from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.orm import Session

from studyquiz.api.common import CamelModel
from studyquiz.core.auth import get_current_owner
from studyquiz.core.database import get_db
from studyquiz.models.orm import Difficulty
from studyquiz.services import feedback as feedback_service

router = APIRouter()


class FeedbackIn(CamelModel):
    question_id: str
    feedback_type: str = Field(min_length=1, max_length=50)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None


class FeedbackQuestion(CamelModel):
    question: str
    topic: str
    difficulty: Difficulty


class FeedbackOut(CamelModel):
    id: str
    question_id: str
    feedback_type: str
    rating: Optional[int]
    comment: Optional[str]
    created_at: datetime
    question: Optional[FeedbackQuestion] = None


class FeedbackSaved(CamelModel):
    success: bool = True
    feedback: FeedbackOut


class FeedbackList(CamelModel):
    feedback: List[FeedbackOut]


@router.post("", response_model=FeedbackSaved, status_code=201)
def submit_feedback(payload: FeedbackIn, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    fb = feedback_service.submit_feedback(
        db, owner_id, payload.question_id, payload.feedback_type,
        rating=payload.rating, comment=payload.comment,
    )
    return FeedbackSaved(feedback=FeedbackOut.model_validate(fb))


@router.get("", response_model=FeedbackList)
def list_feedback(
    question_id: Optional[str] = Query(default=None, alias="questionId"),
    owner_id: str = Depends(get_current_owner),
    db: Session = Depends(get_db),
):
    items = feedback_service.list_feedback(db, owner_id, question_id)
    return FeedbackList(feedback=[FeedbackOut.model_validate(f) for f in items])
