from datetime import datetime
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studyquiz.api.common import CamelModel
from studyquiz.core.auth import get_current_owner
from studyquiz.core.database import get_db
from studyquiz.services.dashboard import compute_dashboard

router = APIRouter()


class DocumentStatsOut(CamelModel):
    total: int
    processed: int
    this_week: int


class QuestionStatsOut(CamelModel):
    total: int
    by_difficulty: Dict[str, int]
    by_type: Dict[str, int]


class QuizStatsOut(CamelModel):
    total: int
    completed: int
    average_score: float
    total_questions: int
    correct_answers: int
    streak: int


class ActivityOut(CamelModel):
    type: Literal["document", "quiz", "question"]
    title: str
    date: datetime
    score: Optional[int] = None


class DashboardOut(CamelModel):
    documents: DocumentStatsOut
    questions: QuestionStatsOut
    quizzes: QuizStatsOut
    recent_activity: List[ActivityOut]


@router.get("/stats", response_model=DashboardOut)
def dashboard_stats(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    return DashboardOut.model_validate(compute_dashboard(db, owner_id))
