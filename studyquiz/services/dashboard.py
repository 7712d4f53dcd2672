"""
Dashboard roll-up: document, question and quiz counts plus a short merged
activity feed. Read-only; it only recombines what the other services store.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from studyquiz.core.clock import as_utc, local_zone, resolve_now
from studyquiz.core.database import storage_operation
from studyquiz.models.orm import (
    Difficulty, Document, Question, QuizResponse, QuizSession, SessionStatus,
)
from studyquiz.services.streak import owner_streak

NEW_DOCUMENT_WINDOW = timedelta(days=7)
RECENT_DOCUMENTS = 3
RECENT_QUIZZES = 3
RECENT_QUESTIONS = 2
RECENT_ACTIVITY_LIMIT = 8
DEFAULT_QUIZ_TITLE = "Practice Quiz"


@dataclass
class DocumentStats:
    total: int = 0
    processed: int = 0
    this_week: int = 0


@dataclass
class QuestionStats:
    total: int = 0
    by_difficulty: Dict[str, int] = field(default_factory=dict)
    by_type: Dict[str, int] = field(default_factory=dict)


@dataclass
class QuizStats:
    total: int = 0
    completed: int = 0
    average_score: float = 0.0
    total_questions: int = 0
    correct_answers: int = 0
    streak: int = 0


@dataclass
class ActivityItem:
    type: str
    title: str
    date: datetime
    score: Optional[int] = None


@dataclass
class DashboardStats:
    documents: DocumentStats
    questions: QuestionStats
    quizzes: QuizStats
    recent_activity: List[ActivityItem]


def _document_stats(documents: List[Document], now: datetime) -> DocumentStats:
    cutoff = now - NEW_DOCUMENT_WINDOW
    return DocumentStats(
        total=len(documents),
        processed=sum(1 for d in documents if d.processed),
        this_week=sum(1 for d in documents if as_utc(d.upload_date) >= cutoff),
    )


def _question_stats(db: Session, owner_id: str) -> QuestionStats:
    by_difficulty = {d.value: 0 for d in Difficulty}
    for difficulty, count in db.execute(
        select(Question.difficulty, func.count()).where(Question.user_id == owner_id).group_by(Question.difficulty)
    ):
        by_difficulty[difficulty.value] = count
    by_type = {
        qtype.value: count
        for qtype, count in db.execute(
            select(Question.type, func.count()).where(Question.user_id == owner_id).group_by(Question.type)
        )
    }
    return QuestionStats(total=sum(by_difficulty.values()), by_difficulty=by_difficulty, by_type=by_type)


def _quiz_stats(db: Session, owner_id: str, completed: List[QuizSession], total: int,
                now: datetime, tz: tzinfo) -> QuizStats:
    correct_answers = db.scalar(
        select(func.count())
        .select_from(QuizResponse)
        .join(QuizSession, QuizResponse.session_id == QuizSession.id)
        .where(
            QuizSession.user_id == owner_id,
            QuizSession.status == SessionStatus.COMPLETED,
            QuizResponse.is_correct.is_(True),
        )
    ) or 0
    return QuizStats(
        total=total,
        completed=len(completed),
        average_score=(sum(s.score or 0 for s in completed) / len(completed)) if completed else 0.0,
        total_questions=sum(s.total_questions for s in completed),
        correct_answers=correct_answers,
        streak=owner_streak(db, owner_id, now=now, tz=tz),
    )


def _recent_activity(documents: List[Document], completed: List[QuizSession],
                     recent_questions: List[Question]) -> List[ActivityItem]:
    items = [
        ActivityItem(type="document", title=f'Uploaded "{d.title}"', date=as_utc(d.upload_date))
        for d in documents[:RECENT_DOCUMENTS]
    ]
    items += [
        ActivityItem(type="quiz", title=s.session_name or DEFAULT_QUIZ_TITLE,
                     date=as_utc(s.started_at), score=s.score)
        for s in completed[:RECENT_QUIZZES]
    ]
    items += [
        ActivityItem(type="question", title="Generated questions", date=as_utc(q.created_at))
        for q in recent_questions
    ]
    items.sort(key=lambda item: item.date, reverse=True)
    return items[:RECENT_ACTIVITY_LIMIT]


def compute_dashboard(
    db: Session,
    owner_id: str,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DashboardStats:
    now = resolve_now(now)
    tz = tz or local_zone()
    with storage_operation(db, "Failed to fetch stats"):
        documents = list(db.scalars(
            select(Document).where(Document.user_id == owner_id).order_by(Document.upload_date.desc())
        ).all())
        sessions = list(db.scalars(
            select(QuizSession).where(QuizSession.user_id == owner_id).order_by(QuizSession.started_at.desc())
        ).all())
        completed = [s for s in sessions if s.status == SessionStatus.COMPLETED]
        recent_questions = list(db.scalars(
            select(Question)
            .where(Question.user_id == owner_id)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .limit(RECENT_QUESTIONS)
        ).all())

        return DashboardStats(
            documents=_document_stats(documents, now),
            questions=_question_stats(db, owner_id),
            quizzes=_quiz_stats(db, owner_id, completed, len(sessions), now, tz),
            recent_activity=_recent_activity(documents, completed, recent_questions),
        )
