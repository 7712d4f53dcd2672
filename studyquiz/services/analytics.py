"""
Performance analytics over a learner's completed sessions.

Two accuracy methods coexist on purpose:

* the per-day time series averages *session* accuracies (every session counts
  once, whatever its length);
* the topic and difficulty breakdowns pool every response and take a true
  correct/total ratio (every question counts once).

The two can disagree on the same data; callers must not reconcile them.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from studyquiz.core.clock import local_date, local_zone, resolve_now
from studyquiz.core.database import storage_operation
from studyquiz.core.errors import ValidationError
from studyquiz.models.orm import Difficulty, QuizResponse, QuizSession, SessionStatus
from studyquiz.services.insights import TopicInsights, TopicPerformance, extract_insights

logger = logging.getLogger(__name__)


@dataclass
class AccuracyTally:
    correct: int = 0
    total: int = 0

    def add(self, is_correct: Optional[bool]) -> None:
        self.total += 1
        if is_correct:
            self.correct += 1

    @property
    def accuracy(self) -> float:
        return (self.correct / self.total) * 100 if self.total else 0.0


@dataclass
class ResponseOutcome:
    is_correct: Optional[bool]
    topic: str
    difficulty: Difficulty


@dataclass
class SessionSnapshot:
    started_at: datetime
    outcomes: List[ResponseOutcome] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        total = len(self.outcomes)
        if not total:
            return 0.0
        return sum(1 for o in self.outcomes if o.is_correct) / total * 100


@dataclass
class DayPerformance:
    date: str
    total_sessions: int = 0
    total_accuracy: float = 0.0
    average_accuracy: float = 0.0

    def add_session(self, accuracy: float) -> None:
        self.total_sessions += 1
        self.total_accuracy += accuracy
        self.average_accuracy = self.total_accuracy / self.total_sessions


@dataclass
class DifficultyPerformance:
    difficulty: Difficulty
    accuracy: float
    total_questions: int
    correct_answers: int = 0


@dataclass
class AnalyticsInsights:
    weak_topics: List[TopicPerformance]
    strong_topics: List[TopicPerformance]
    total_sessions: int
    average_accuracy: float


@dataclass
class AnalyticsReport:
    performance_over_time: List[DayPerformance]
    topic_performance: List[TopicPerformance]
    difficulty_performance: List[DifficultyPerformance]
    insights: AnalyticsInsights


def aggregate_sessions(sessions: Sequence[SessionSnapshot], tz: tzinfo) -> AnalyticsReport:
    days: Dict[str, DayPerformance] = {}
    by_topic: Dict[str, AccuracyTally] = {}
    by_difficulty: Dict[Difficulty, AccuracyTally] = {}

    for snap in sessions:
        day_key = local_date(snap.started_at, tz).isoformat()
        days.setdefault(day_key, DayPerformance(date=day_key)).add_session(snap.accuracy)

        for outcome in snap.outcomes:
            by_topic.setdefault(outcome.topic, AccuracyTally()).add(outcome.is_correct)
            by_difficulty.setdefault(outcome.difficulty, AccuracyTally()).add(outcome.is_correct)

    topic_performance = [
        TopicPerformance(topic=topic, accuracy=t.accuracy, total_questions=t.total, correct_answers=t.correct)
        for topic, t in by_topic.items()
    ]
    difficulty_performance = [
        DifficultyPerformance(difficulty=d, accuracy=t.accuracy, total_questions=t.total, correct_answers=t.correct)
        for d, t in by_difficulty.items()
    ]
    topic_insights: TopicInsights = extract_insights(topic_performance)
    average_accuracy = (
        sum(s.accuracy for s in sessions) / len(sessions) if sessions else 0.0
    )

    return AnalyticsReport(
        performance_over_time=sorted(days.values(), key=lambda d: d.date),
        topic_performance=topic_performance,
        difficulty_performance=difficulty_performance,
        insights=AnalyticsInsights(
            weak_topics=topic_insights.weak_topics,
            strong_topics=topic_insights.strong_topics,
            total_sessions=len(sessions),
            average_accuracy=average_accuracy,
        ),
    )


def load_completed_sessions(db: Session, owner_id: str, since: datetime) -> List[SessionSnapshot]:
    stmt = (
        select(QuizSession)
        .options(selectinload(QuizSession.responses).selectinload(QuizResponse.question))
        .where(
            QuizSession.user_id == owner_id,
            QuizSession.status == SessionStatus.COMPLETED,
            QuizSession.started_at >= since,
        )
        .order_by(QuizSession.started_at.asc())
    )
    snapshots = []
    for session in db.scalars(stmt).all():
        outcomes = [
            ResponseOutcome(is_correct=r.is_correct, topic=r.question.topic, difficulty=r.question.difficulty)
            for r in session.responses
            if r.question is not None
        ]
        snapshots.append(SessionSnapshot(started_at=session.started_at, outcomes=outcomes))
    return snapshots


def compute_analytics(
    db: Session,
    owner_id: str,
    window_days: int,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> AnalyticsReport:
    if window_days < 1:
        raise ValidationError("timeframe must be a positive number of days")
    since = resolve_now(now) - timedelta(days=window_days)
    with storage_operation(db, "Failed to fetch analytics"):
        sessions = load_completed_sessions(db, owner_id, since)
    logger.debug("Aggregating %d sessions for %s over %d days", len(sessions), owner_id, window_days)
    return aggregate_sessions(sessions, tz or local_zone())
