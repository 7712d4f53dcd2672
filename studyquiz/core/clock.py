"""Timestamp helpers: everything is stored in UTC, days are counted locally."""
from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from studyquiz.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_zone(name: str | None = None) -> tzinfo:
    return ZoneInfo(name or settings.TIMEZONE)


def local_date(value: datetime, tz: tzinfo) -> date:
    """Calendar day ``value`` falls on in ``tz``."""
    return as_utc(value).astimezone(tz).date()


def resolve_now(now: datetime | None = None) -> datetime:
    """``now`` normalised to UTC, defaulting to the current time."""
    return as_utc(now) if now is not None else utcnow()
