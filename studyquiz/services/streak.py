from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from studyquiz.core.clock import local_date, local_zone, resolve_now
from studyquiz.core.database import storage_operation
from studyquiz.models.orm import QuizSession, SessionStatus


def compute_streak(session_starts: Iterable[datetime], now: datetime, tz: tzinfo) -> int:
    """
    Consecutive local calendar days, ending today, with at least one completed
    session started on them. No session today means a streak of 0.
    """
    active_days = {local_date(ts, tz) for ts in session_starts}
    day = local_date(now, tz)
    streak = 0
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def owner_streak(db: Session, owner_id: str, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> int:
    with storage_operation(db, "Failed to compute streak"):
        starts = db.scalars(
            select(QuizSession.started_at).where(
                QuizSession.user_id == owner_id,
                QuizSession.status == SessionStatus.COMPLETED,
            )
        ).all()
    return compute_streak(starts, resolve_now(now), tz or local_zone())
