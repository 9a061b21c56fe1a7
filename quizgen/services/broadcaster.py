"""
Pushing quiz items to the live audience.

Delivery is best-effort: a push reaches whoever is connected at that moment
and nothing is queued for anyone else. Clients that were away recover through
``get_latest_pushed_quiz_item`` within a bounded window.
"""
import logging
from datetime import timedelta

from flask import current_app

from extensions import db
from quizgen.errors import InvalidStateError, NotFoundError, NotParticipantError
from quizgen.models import QuizItem
from quizgen.services.connection_registry import get_registry
from quizgen.services.lecture_service import get_lecture, get_owned_lecture, is_participant
from quizgen.services.quiz_item_service import public_payload
from quizgen.services.utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_RECOVERY_WINDOW = timedelta(minutes=5)


def new_quiz_message(item):
    return {"type": "new_quiz", "quiz": public_payload(item)}


def push_quiz_item(lecture_id, quiz_item_id, user_id, registry=None, now=None):
    """Mark the item as pushed and fan it out. Returns how many subscribers got it."""
    lecture = get_owned_lecture(lecture_id, user_id)
    if lecture.status != "in_progress":
        raise InvalidStateError("Quiz items can only be pushed while the lecture is in progress.")

    item = db.session.get(QuizItem, quiz_item_id)
    if not item or item.lecture_id != lecture.id:
        raise NotFoundError("Quiz item not found in this lecture.")

    item.pushed_at = now or utcnow()
    db.session.commit()

    registry = registry or get_registry()
    delivered = registry.broadcast(lecture.id, new_quiz_message(item))
    if delivered == 0:
        logger.info("Quiz item %s pushed to lecture %s with no audience connected", item.id, lecture.id)
    else:
        logger.info("Quiz item %s pushed to %s subscribers of lecture %s", item.id, delivered, lecture.id)
    return delivered


def _recovery_window():
    seconds = current_app.config.get("RECOVERY_WINDOW_SECONDS")
    return timedelta(seconds=seconds) if seconds is not None else DEFAULT_RECOVERY_WINDOW


def get_latest_pushed_quiz_item(lecture_id, within=None, now=None):
    """Most recently pushed item of the lecture, or None if it is older than ``within``."""
    if within is None:
        within = _recovery_window()
    elif not isinstance(within, timedelta):
        within = timedelta(seconds=within)

    item = QuizItem.query.filter(
        QuizItem.lecture_id == lecture_id,
        QuizItem.pushed_at.isnot(None),
    ).order_by(QuizItem.pushed_at.desc(), QuizItem.id.desc()).first()

    if not item:
        return None
    if (now or utcnow()) - item.pushed_at > within:
        return None
    return item


def ensure_audience_access(lecture_id, user_id):
    """Participants and the owner may follow a lecture's live feed."""
    lecture = get_lecture(lecture_id)
    if lecture.owner_id != user_id and not is_participant(lecture.id, user_id):
        raise NotParticipantError()
    return lecture
