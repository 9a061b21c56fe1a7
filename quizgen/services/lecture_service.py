"""Lecture and participant store: join codes, status transitions, membership."""
import logging
import re
import secrets

from sqlalchemy.exc import IntegrityError

from extensions import db
from quizgen.errors import (
    InvalidInputError,
    InvalidStateError,
    NotAuthorizedError,
    NotFoundError,
)
from quizgen.models import Lecture, Participant, LECTURE_STATUSES

logger = logging.getLogger(__name__)

# No 0/O, 1/I/l so codes can be read aloud and typed from a projector.
JOIN_CODE_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
JOIN_CODE_LENGTH = 6
_JOIN_CODE_ATTEMPTS = 10

STATUS_TRANSITIONS = {
    "not_started": {"in_progress", "ended"},
    "in_progress": {"paused", "ended"},
    "paused": {"in_progress", "ended"},
    "ended": set(),
}


def generate_join_code():
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))


def format_join_code(code):
    return re.sub(r"[^A-Za-z0-9]", "", code or "").upper().strip()


def is_valid_join_code(code):
    if not code or len(code) != JOIN_CODE_LENGTH:
        return False
    return all(ch in JOIN_CODE_ALPHABET for ch in code)


def get_lecture(lecture_id):
    lecture = db.session.get(Lecture, lecture_id)
    if not lecture:
        raise NotFoundError("Lecture not found.")
    return lecture


def ensure_owner(lecture, user_id):
    if lecture.owner_id != user_id:
        raise NotAuthorizedError("Only the lecture owner can do this.")


def get_owned_lecture(lecture_id, user_id):
    lecture = get_lecture(lecture_id)
    ensure_owner(lecture, user_id)
    return lecture


def create_lecture(owner_id, title):
    title = (title or "").strip()
    if not title:
        raise InvalidInputError("Lecture title must not be empty.")

    for _ in range(_JOIN_CODE_ATTEMPTS):
        code = generate_join_code()
        if Lecture.query.filter_by(join_code=code).first():
            continue
        lecture = Lecture(title=title, owner_id=owner_id, join_code=code)
        db.session.add(lecture)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            continue
        logger.info("Lecture %s created by %s (code %s)", lecture.id, owner_id, code)
        return lecture

    raise InvalidStateError("Could not allocate a unique join code, try again.")


def change_status(lecture_id, user_id, new_status):
    if new_status not in LECTURE_STATUSES:
        raise InvalidInputError(f"Unknown lecture status: {new_status}")

    lecture = get_owned_lecture(lecture_id, user_id)
    if new_status == lecture.status:
        return lecture
    if new_status not in STATUS_TRANSITIONS[lecture.status]:
        raise InvalidStateError(f"Cannot change lecture from {lecture.status} to {new_status}.")

    old_status = lecture.status
    lecture.status = new_status
    db.session.commit()
    logger.info("Lecture %s status %s -> %s", lecture.id, old_status, new_status)
    return lecture


def is_participant(lecture_id, user_id):
    if not user_id:
        return False
    return Participant.query.filter_by(lecture_id=lecture_id, user_id=user_id).first() is not None


def join_lecture_by_code(user_id, raw_code):
    """Register ``user_id`` as audience of the lecture with this join code.

    Joining twice is harmless: the (lecture, user) unique constraint absorbs a
    concurrent second insert and the existing membership is kept.
    """
    code = format_join_code(raw_code)
    if not is_valid_join_code(code):
        raise InvalidInputError("Invalid join code format.")

    lecture = Lecture.query.filter_by(join_code=code).first()
    if not lecture:
        raise NotFoundError("No lecture with this join code.")
    if lecture.status == "ended":
        raise InvalidStateError("This lecture has ended.")

    if not is_participant(lecture.id, user_id):
        db.session.add(Participant(lecture_id=lecture.id, user_id=user_id))
        try:
            db.session.commit()
            logger.info("User %s joined lecture %s", user_id, lecture.id)
        except IntegrityError:
            db.session.rollback()

    return lecture
