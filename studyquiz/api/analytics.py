from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from studyquiz.api.common import CamelModel
from studyquiz.core.auth import get_current_owner
from studyquiz.core.config import settings
from studyquiz.core.database import get_db
from studyquiz.models.orm import Difficulty
from studyquiz.services.analytics import compute_analytics

router = APIRouter()


class DayPerformanceOut(CamelModel):
    date: str
    total_sessions: int
    total_accuracy: float
    average_accuracy: float


class TopicPerformanceOut(CamelModel):
    topic: str
    accuracy: float
    total_questions: int
    correct_answers: int


class DifficultyPerformanceOut(CamelModel):
    difficulty: Difficulty
    accuracy: float
    total_questions: int
    correct_answers: int


class InsightsOut(CamelModel):
    weak_topics: List[TopicPerformanceOut]
    strong_topics: List[TopicPerformanceOut]
    total_sessions: int
    average_accuracy: float


class AnalyticsOut(CamelModel):
    performance_over_time: List[DayPerformanceOut]
    topic_performance: List[TopicPerformanceOut]
    difficulty_performance: List[DifficultyPerformanceOut]
    insights: InsightsOut


@router.get("", response_model=AnalyticsOut)
def get_analytics(
    timeframe: int = Query(default=settings.ANALYTICS_DEFAULT_TIMEFRAME, description="Window in days"),
    owner_id: str = Depends(get_current_owner),
    db: Session = Depends(get_db),
):
    return AnalyticsOut.model_validate(compute_analytics(db, owner_id, timeframe))
