from extensions import db
from quizgen.errors import InvalidInputError, InvalidStateError, NotFoundError
from quizgen.models import QuizItem, OPTION_COUNT
from quizgen.services.lecture_service import get_owned_lecture
from quizgen.services.utils import isoformat


def get_quiz_item(quiz_item_id):
    item = db.session.get(QuizItem, quiz_item_id)
    if not item:
        raise NotFoundError("Quiz item not found.")
    return item


def _validate_options(options):
    if not isinstance(options, (list, tuple)) or len(options) != OPTION_COUNT:
        raise InvalidInputError(f"A quiz item needs exactly {OPTION_COUNT} options.")
    cleaned = [str(option).strip() if option is not None else "" for option in options]
    if any(not option for option in cleaned):
        raise InvalidInputError("Option text cannot be empty.")
    return cleaned


def create_quiz_item(lecture_id, user_id, question, options, answer, explanation=None):
    lecture = get_owned_lecture(lecture_id, user_id)
    if lecture.status == "ended":
        raise InvalidStateError("Quiz items of an ended lecture are read-only.")

    question = (question or "").strip()
    if not question:
        raise InvalidInputError("Question text must not be empty.")
    cleaned = _validate_options(options)
    if isinstance(answer, bool) or not isinstance(answer, int) or not 0 <= answer < OPTION_COUNT:
        raise InvalidInputError(f"Correct answer must be an index between 0 and {OPTION_COUNT - 1}.")

    item = QuizItem(
        lecture_id=lecture.id,
        question=question,
        answer=answer,
        explanation=(explanation or "").strip() or None,
    )
    item.set_options(cleaned)
    db.session.add(item)
    db.session.commit()
    return item


def public_payload(item):
    """What the audience sees. The correct answer stays on the server."""
    return {
        "id": item.id,
        "lecture_id": item.lecture_id,
        "question": item.question,
        "options": item.get_options(),
        "created_at": isoformat(item.created_at),
        "pushed_at": isoformat(item.pushed_at),
    }


def owner_payload(item):
    payload = public_payload(item)
    payload["answer"] = item.answer
    payload["explanation"] = item.explanation
    return payload
