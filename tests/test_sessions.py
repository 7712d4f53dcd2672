from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from studyquiz.core.config import settings
from studyquiz.core.errors import NotFoundError, PersistenceError, ValidationError
from studyquiz.models.orm import Difficulty, QuestionType, QuizResponse, QuizSession, SessionStatus
from studyquiz.services.sessions import QuestionView, list_sessions, start_session

from conftest import BASE_TIME, OTHER, OWNER


def _response_count(db, session_id):
    return db.scalar(select(func.count()).select_from(QuizResponse).where(QuizResponse.session_id == session_id))


def test_start_creates_one_response_slot_per_question(db, add_question):
    for _ in range(4):
        add_question()

    started = start_session(db, OWNER, question_count=3)

    session = db.get(QuizSession, started.session_id)
    assert session.status == SessionStatus.IN_PROGRESS
    assert session.score is None
    assert session.total_questions == 3
    assert _response_count(db, session.id) == session.total_questions
    slots = db.scalars(select(QuizResponse).where(QuizResponse.session_id == session.id)).all()
    assert all(s.user_answer is None and s.is_correct is None and s.answered_at is None for s in slots)


def test_total_questions_is_actual_selection_size(db, add_question):
    add_question()
    add_question()

    started = start_session(db, OWNER, question_count=10)

    assert len(started.questions) == 2
    assert db.get(QuizSession, started.session_id).total_questions == 2
    assert _response_count(db, started.session_id) == 2


def test_selection_is_newest_first(db, add_question):
    oldest = add_question(text="old")
    middle = add_question(text="middle")
    newest = add_question(text="new")

    started = start_session(db, OWNER, question_count=2)

    assert [q.id for q in started.questions] == [newest.id, middle.id]
    assert oldest.id not in {q.id for q in started.questions}


def test_filters_by_document_difficulty_and_types(db, add_question, add_document):
    doc = add_document()
    match = add_question(document_id=doc.id, difficulty=Difficulty.HARD, qtype=QuestionType.TRUE_FALSE)
    add_question(document_id=doc.id, difficulty=Difficulty.EASY, qtype=QuestionType.TRUE_FALSE)
    add_question(document_id=doc.id, difficulty=Difficulty.HARD, qtype=QuestionType.ESSAY)
    add_question(difficulty=Difficulty.HARD, qtype=QuestionType.TRUE_FALSE)

    started = start_session(
        db, OWNER, question_count=10, document_id=doc.id, difficulty=Difficulty.HARD,
        question_types=[QuestionType.TRUE_FALSE, QuestionType.MULTIPLE_CHOICE],
    )

    assert [q.id for q in started.questions] == [match.id]
    assert db.get(QuizSession, started.session_id).document_id == doc.id


def test_empty_type_filter_means_any_type(db, add_question):
    add_question(qtype=QuestionType.ESSAY)
    add_question(qtype=QuestionType.MULTIPLE_CHOICE, options=["a", "b"])

    started = start_session(db, OWNER, question_count=5, question_types=[])

    assert len(started.questions) == 2


def test_empty_pool_is_not_found_and_creates_nothing(db, add_question):
    add_question(owner=OTHER)

    with pytest.raises(NotFoundError):
        start_session(db, OWNER, question_count=5)

    assert db.scalar(select(func.count()).select_from(QuizSession)) == 0


def test_only_owner_questions_are_selected(db, add_question):
    mine = add_question()
    add_question(owner=OTHER)

    started = start_session(db, OWNER, question_count=5)

    assert [q.id for q in started.questions] == [mine.id]


def test_started_questions_carry_no_answers(db, add_question):
    add_question(correct="Paris", explanation="secret")

    started = start_session(db, OWNER, question_count=1)

    view = started.questions[0]
    assert isinstance(view, QuestionView)
    assert not hasattr(view, "correct_answer")
    assert not hasattr(view, "explanation")


def test_question_count_must_be_positive(db, add_question):
    add_question()
    with pytest.raises(ValidationError):
        start_session(db, OWNER, question_count=0)


def test_session_name_is_stored_and_history_is_newest_first(db, add_question):
    add_question()
    first = start_session(db, OWNER, question_count=1, session_name="Warm-up", now=BASE_TIME)
    second = start_session(db, OWNER, question_count=1, now=BASE_TIME + timedelta(hours=1))

    history = list_sessions(db, OWNER)

    assert [s.id for s in history] == [second.session_id, first.session_id]
    assert history[1].session_name == "Warm-up"
    assert list_sessions(db, OTHER) == []


def test_question_count_above_the_cap_is_clamped(db, add_question, monkeypatch):
    monkeypatch.setattr(settings, "MAX_QUESTION_COUNT", 2)
    for _ in range(4):
        add_question()

    started = start_session(db, OWNER, question_count=50)

    assert len(started.questions) == 2
    assert db.get(QuizSession, started.session_id).total_questions == 2


def test_failed_commit_leaves_no_session_behind(db, add_question, monkeypatch):
    for _ in range(3):
        add_question()

    def broken_commit(self):
        raise OperationalError("INSERT INTO quiz_sessions", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", broken_commit)
    with pytest.raises(PersistenceError) as excinfo:
        start_session(db, OWNER, question_count=3)
    monkeypatch.undo()

    assert excinfo.value.message == "Failed to create quiz session"
    assert db.scalar(select(func.count()).select_from(QuizSession)) == 0
    assert db.scalar(select(func.count()).select_from(QuizResponse)) == 0
