import threading
from datetime import timedelta

import pytest

from extensions import db
from quizgen.errors import (
    DuplicateAttemptError,
    InvalidInputError,
    InvalidOptionError,
    InvalidStateError,
    LectureInactiveError,
    NotAuthorizedError,
    NotFoundError,
    NotParticipantError,
)
from quizgen.models import Attempt
from quizgen.services.attempt_ledger import submit_attempt
from quizgen.services.broadcaster import push_quiz_item
from quizgen.services.utils import utcnow


@pytest.fixture
def live_item(make_lecture, make_quiz_item, add_participant):
    lecture = make_lecture()
    add_participant(lecture, "alice")
    return make_quiz_item(lecture, answer=2)


def test_correct_answer_then_duplicate(live_item):
    result = submit_attempt(live_item.id, "alice", 2, latency_ms=1800)

    assert result.correct is True
    assert result.correct_answer_index == 2
    assert result.to_dict()["attempt"]["latency_ms"] == 1800

    with pytest.raises(DuplicateAttemptError) as excinfo:
        submit_attempt(live_item.id, "alice", 1, latency_ms=900)
    assert excinfo.value.kind == "duplicate"
    assert Attempt.query.filter_by(quiz_item_id=live_item.id, user_id="alice").count() == 1


def test_wrong_answer_reveals_correct_index(live_item):
    result = submit_attempt(live_item.id, "alice", 0, latency_ms=500)
    assert result.correct is False
    assert result.correct_answer_index == 2
    assert result.attempt.selected == 0


@pytest.mark.parametrize("option", [4, -1, 99])
def test_out_of_range_option_is_rejected_not_clamped(live_item, option):
    with pytest.raises(InvalidOptionError) as excinfo:
        submit_attempt(live_item.id, "alice", option, latency_ms=10)
    assert excinfo.value.kind == "invalid-input"
    assert Attempt.query.count() == 0


def test_non_integer_option_is_invalid(live_item):
    with pytest.raises(InvalidInputError):
        submit_attempt(live_item.id, "alice", True, latency_ms=10)


def test_ended_lecture_rejects_answers(live_item):
    live_item.lecture.status = "ended"
    db.session.commit()

    with pytest.raises(LectureInactiveError) as excinfo:
        submit_attempt(live_item.id, "alice", 2, latency_ms=10)
    assert excinfo.value.kind == "invalid-state"
    assert isinstance(excinfo.value, InvalidStateError)


def test_not_started_lecture_rejects_answers(live_item):
    live_item.lecture.status = "not_started"
    db.session.commit()
    with pytest.raises(LectureInactiveError):
        submit_attempt(live_item.id, "alice", 2, latency_ms=10)


def test_paused_lecture_still_accepts_answers(live_item):
    live_item.lecture.status = "paused"
    db.session.commit()
    assert submit_attempt(live_item.id, "alice", 2, latency_ms=10).correct


def test_unknown_quiz_item(ctx):
    with pytest.raises(NotFoundError):
        submit_attempt(12345, "alice", 0, latency_ms=10)


def test_non_participant_is_rejected(live_item):
    with pytest.raises(NotParticipantError) as excinfo:
        submit_attempt(live_item.id, "stranger", 2, latency_ms=10)
    assert isinstance(excinfo.value, NotAuthorizedError)
    assert excinfo.value.code == "not-participant"


def test_preconditions_are_checked_in_order(live_item):
    live_item.lecture.status = "ended"
    db.session.commit()
    # Ended lecture wins over both the missing membership and the bad option
    with pytest.raises(LectureInactiveError):
        submit_attempt(live_item.id, "stranger", 7, latency_ms=10)

    live_item.lecture.status = "in_progress"
    db.session.commit()
    with pytest.raises(NotParticipantError):
        submit_attempt(live_item.id, "stranger", 7, latency_ms=10)


def test_negative_latency_is_invalid(live_item):
    with pytest.raises(InvalidInputError):
        submit_attempt(live_item.id, "alice", 2, latency_ms=-5)


def test_latency_measured_from_push_when_not_reported(live_item):
    t0 = utcnow()
    push_quiz_item(live_item.lecture_id, live_item.id, "speaker", now=t0)

    result = submit_attempt(live_item.id, "alice", 1, now=t0 + timedelta(seconds=4, milliseconds=250))
    assert result.attempt.latency_ms == 4250


def test_latency_zero_when_never_pushed_and_not_reported(live_item):
    assert submit_attempt(live_item.id, "alice", 1).attempt.latency_ms == 0


def test_concurrent_identical_submissions_store_exactly_one(app, live_item):
    quiz_item_id = live_item.id
    db.session.remove()

    workers = 8
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def submit():
        with app.app_context():
            barrier.wait()
            try:
                submit_attempt(quiz_item_id, "alice", 2, latency_ms=300)
                outcome = "stored"
            except DuplicateAttemptError:
                outcome = "duplicate"
            finally:
                db.session.remove()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=submit) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("stored") == 1
    assert outcomes.count("duplicate") == workers - 1
    assert Attempt.query.filter_by(quiz_item_id=quiz_item_id, user_id="alice").count() == 1


def test_constraint_catches_insert_that_slips_past_the_lookup(live_item, monkeypatch):
    submit_attempt(live_item.id, "alice", 2, latency_ms=100)

    # Simulate the race: the fast-path lookup sees nothing, the insert still collides
    class EmptyQuery:
        def filter_by(self, **kwargs):
            return self

        def first(self):
            return None

    monkeypatch.setattr(Attempt, "query", EmptyQuery())
    with pytest.raises(DuplicateAttemptError):
        submit_attempt(live_item.id, "alice", 3, latency_ms=100)
    monkeypatch.undo()

    assert Attempt.query.filter_by(quiz_item_id=live_item.id).count() == 1
