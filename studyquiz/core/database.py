import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from studyquiz.core.config import settings
from studyquiz.core.errors import PersistenceError

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # single shared connection so in-memory databases survive across sessions
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_operation(db: Session, failure_message: str) -> Iterator[Session]:
    """
    Run a block of ORM work as one unit.

    Any ``SQLAlchemyError`` rolls the session back, is logged with full detail
    and resurfaces as a ``PersistenceError`` carrying only ``failure_message``.
    """
    try:
        yield db
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s: %s", failure_message, exc)
        raise PersistenceError(failure_message) from exc


def init_db() -> None:
    from studyquiz.models.orm import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized")
