"""
Answer submissions, at most one per participant per quiz item.

Preconditions are checked in a fixed order and each failure has its own error
type. The duplicate rule is enforced by the ``uq_attempt_quiz_item_user``
constraint; the lookup before the insert only saves a round trip in the common
case, and a constraint violation from a racing request maps to the same
``DuplicateAttemptError``.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from extensions import db
from quizgen.errors import (
    DuplicateAttemptError,
    InvalidInputError,
    InvalidOptionError,
    LectureInactiveError,
    NotFoundError,
    NotParticipantError,
)
from quizgen.models import Attempt, QuizItem, OPTION_COUNT
from quizgen.services.lecture_service import is_participant
from quizgen.services.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AttemptResult:
    attempt: Attempt
    correct_answer_index: int

    @property
    def correct(self):
        return bool(self.attempt.is_correct)

    def to_dict(self):
        return {
            "correct": self.correct,
            "correct_answer_index": self.correct_answer_index,
            "attempt": self.attempt.to_dict(),
        }


def _is_index(value):
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_latency(item, latency_ms, now=None):
    """Client-reported latency when given, else time since the item was pushed."""
    if latency_ms is not None:
        if not _is_index(latency_ms) or latency_ms < 0:
            raise InvalidInputError("latency_ms must be a non-negative integer.")
        return latency_ms
    if not item.pushed_at:
        return 0
    elapsed = (now or utcnow()) - item.pushed_at
    return max(0, int(elapsed.total_seconds() * 1000))


def submit_attempt(quiz_item_id, user_id, selected_option, latency_ms=None, now=None):
    item = db.session.get(QuizItem, quiz_item_id)
    if not item:
        raise NotFoundError("Quiz item not found.")

    lecture = item.lecture
    if lecture is None:
        raise NotFoundError("Lecture not found.")
    if lecture.status == "ended":
        raise LectureInactiveError("This lecture has ended.")
    if lecture.status == "not_started":
        raise LectureInactiveError("This lecture has not started yet.")

    if not is_participant(lecture.id, user_id):
        raise NotParticipantError()

    option_count = len(item.get_options()) or OPTION_COUNT
    if not _is_index(selected_option) or not 0 <= selected_option < option_count:
        raise InvalidOptionError(f"Selected option must be between 0 and {option_count - 1}.")

    latency = resolve_latency(item, latency_ms, now)

    if Attempt.query.filter_by(quiz_item_id=item.id, user_id=user_id).first():
        raise DuplicateAttemptError()

    correct_answer = item.answer
    attempt = Attempt(
        quiz_item_id=item.id,
        user_id=user_id,
        selected=selected_option,
        is_correct=selected_option == correct_answer,
        latency_ms=latency,
    )
    db.session.add(attempt)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.info("Duplicate attempt by %s on quiz item %s rejected by constraint", user_id, quiz_item_id)
        raise DuplicateAttemptError()

    return AttemptResult(attempt=attempt, correct_answer_index=correct_answer)
