import itertools
import os
from datetime import datetime, timedelta, timezone

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["PROMETHEUS_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["TIMEZONE"] = "UTC"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from studyquiz.core.auth import create_token
from studyquiz.core.database import SessionLocal, engine
from studyquiz.main import app
from studyquiz.models.orm import Base, Difficulty, Document, Question, QuestionType

OWNER = "learner-1"
OTHER = "learner-2"
BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db(schema):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(schema):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_token(OWNER)}"}


@pytest.fixture
def add_question(db):
    """Insert a question; each call is created one minute after the previous one."""
    counter = itertools.count()

    def _add(owner=OWNER, *, topic="Geography", difficulty=Difficulty.EASY,
             qtype=QuestionType.SHORT_ANSWER, correct="Paris", options=None,
             explanation="It is the capital.", document_id=None, text=None):
        n = next(counter)
        q = Question(
            user_id=owner,
            question=text or f"Question {n}?",
            type=qtype,
            options=options or [],
            correct_answer=correct,
            explanation=explanation,
            difficulty=difficulty,
            topic=topic,
            document_id=document_id,
            created_at=BASE_TIME + timedelta(minutes=n),
        )
        db.add(q)
        db.commit()
        return q

    return _add


@pytest.fixture
def add_document(db):
    def _add(owner=OWNER, *, title="Notes", processed=True, upload_date=BASE_TIME):
        doc = Document(user_id=owner, title=title, processed=processed, upload_date=upload_date)
        db.add(doc)
        db.commit()
        return doc

    return _add
