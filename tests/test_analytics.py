from datetime import timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from studyquiz.core.errors import ValidationError
from studyquiz.models.orm import Difficulty, QuizResponse, QuizSession, SessionStatus
from studyquiz.services.analytics import (
    ResponseOutcome, SessionSnapshot, aggregate_sessions, compute_analytics,
)

from conftest import BASE_TIME, OTHER, OWNER

UTC = timezone.utc


def _snapshot(started_at, results, topic="Biology", difficulty=Difficulty.EASY):
    return SessionSnapshot(
        started_at=started_at,
        outcomes=[ResponseOutcome(is_correct=r, topic=topic, difficulty=difficulty) for r in results],
    )


@pytest.fixture
def record_session(db):
    """Persist a session whose responses point at the given questions."""
    def _record(questions, answers, started_at, owner=OWNER, status=SessionStatus.COMPLETED):
        session = QuizSession(
            user_id=owner, total_questions=len(questions), status=status,
            started_at=started_at, completed_at=started_at + timedelta(minutes=10),
        )
        session.responses = [
            QuizResponse(question_id=q.id, user_id=owner, position=i, is_correct=a,
                         user_answer=None if a is None else "x")
            for i, (q, a) in enumerate(zip(questions, answers))
        ]
        db.add(session)
        db.commit()
        return session

    return _record


def test_day_average_and_topic_accuracy_disagree_on_purpose():
    # 1/1 and 3/5 on the same day, same topic
    sessions = [
        _snapshot(BASE_TIME, [True]),
        _snapshot(BASE_TIME + timedelta(hours=1), [True, True, True, False, False]),
    ]
    report = aggregate_sessions(sessions, UTC)

    [day] = report.performance_over_time
    assert day.total_sessions == 2
    assert day.average_accuracy == pytest.approx(80.0)  # (100 + 60) / 2

    [topic] = report.topic_performance
    assert (topic.correct_answers, topic.total_questions) == (4, 6)
    assert topic.accuracy == pytest.approx(400 / 6)


def test_time_series_is_in_ascending_date_order():
    sessions = [
        _snapshot(BASE_TIME, [True]),
        _snapshot(BASE_TIME - timedelta(days=2), [False]),
        _snapshot(BASE_TIME - timedelta(days=1), [True, False]),
    ]
    report = aggregate_sessions(sessions, UTC)

    assert [d.date for d in report.performance_over_time] == ["2025-12-30", "2025-12-31", "2026-01-01"]
    assert [d.average_accuracy for d in report.performance_over_time] == [0.0, 50.0, 100.0]


def test_days_are_bucketed_in_the_local_zone():
    late = BASE_TIME.replace(hour=23)  # already Jan 2 in Tokyo
    report = aggregate_sessions([_snapshot(late, [True])], ZoneInfo("Asia/Tokyo"))
    assert report.performance_over_time[0].date == "2026-01-02"


def test_difficulty_breakdown_pools_responses():
    sessions = [
        _snapshot(BASE_TIME, [True, False], difficulty=Difficulty.HARD),
        _snapshot(BASE_TIME, [True, True], difficulty=Difficulty.EASY),
        _snapshot(BASE_TIME, [False], difficulty=Difficulty.HARD),
    ]
    report = aggregate_sessions(sessions, UTC)

    by_difficulty = {d.difficulty: d for d in report.difficulty_performance}
    assert set(by_difficulty) == {Difficulty.HARD, Difficulty.EASY}
    assert by_difficulty[Difficulty.HARD].total_questions == 3
    assert by_difficulty[Difficulty.HARD].accuracy == pytest.approx(100 / 3)
    assert by_difficulty[Difficulty.EASY].accuracy == 100.0


def test_unanswered_responses_count_in_totals():
    report = aggregate_sessions([_snapshot(BASE_TIME, [True, None, None, None])], UTC)

    [topic] = report.topic_performance
    assert topic.total_questions == 4
    assert topic.accuracy == 25.0
    assert report.insights.average_accuracy == 25.0
    assert [t.topic for t in report.insights.weak_topics] == ["Biology"]


def test_insights_average_is_the_mean_of_session_accuracies():
    sessions = [_snapshot(BASE_TIME, [True]), _snapshot(BASE_TIME, [False, False, False])]
    insights = aggregate_sessions(sessions, UTC).insights

    assert insights.total_sessions == 2
    assert insights.average_accuracy == 50.0


def test_no_sessions_yields_an_empty_report():
    report = aggregate_sessions([], UTC)

    assert report.performance_over_time == []
    assert report.topic_performance == []
    assert report.difficulty_performance == []
    assert report.insights.total_sessions == 0
    assert report.insights.average_accuracy == 0.0


def test_compute_analytics_reads_completed_sessions_in_window(db, add_question, record_session):
    qs = [add_question(topic="Physics", difficulty=Difficulty.MEDIUM) for _ in range(3)]
    now = BASE_TIME + timedelta(days=1)

    record_session(qs, [True, True, False], started_at=BASE_TIME)
    record_session(qs, [True, True, True], started_at=BASE_TIME - timedelta(days=45))
    record_session(qs, [False, False, False], started_at=BASE_TIME, status=SessionStatus.IN_PROGRESS)
    record_session(qs, [True, True, True], started_at=BASE_TIME, owner=OTHER)

    report = compute_analytics(db, OWNER, window_days=30, now=now, tz=UTC)

    assert report.insights.total_sessions == 1
    [topic] = report.topic_performance
    assert (topic.topic, topic.correct_answers, topic.total_questions) == ("Physics", 2, 3)
    [day] = report.performance_over_time
    assert day.date == "2026-01-01"

    wide = compute_analytics(db, OWNER, window_days=60, now=now, tz=UTC)
    assert wide.insights.total_sessions == 2


@pytest.mark.parametrize("window", [0, -5])
def test_window_must_be_positive(db, window):
    with pytest.raises(ValidationError):
        compute_analytics(db, OWNER, window_days=window)
