from flask import Blueprint, jsonify

from quizgen.errors import InvalidInputError
from quizgen.models import QuizItem
from quizgen.routes.helpers import coerce_int, get_json_body
from quizgen.services.broadcaster import (
    ensure_audience_access,
    get_latest_pushed_quiz_item,
    push_quiz_item,
)
from quizgen.services.identity import login_required, require_user_id
from quizgen.services.lecture_service import get_owned_lecture
from quizgen.services.quiz_item_service import (
    create_quiz_item,
    get_quiz_item,
    owner_payload,
    public_payload,
)
from quizgen.services.utils import isoformat

quiz_bp = Blueprint("quiz", __name__)


@quiz_bp.route("/api/lectures/<int:lecture_id>/quiz-items", methods=["POST"])
@login_required
def create(lecture_id):
    data = get_json_body()
    options = data.get("options")
    if not isinstance(options, list):
        raise InvalidInputError("options must be a list.")
    item = create_quiz_item(
        lecture_id,
        require_user_id(),
        question=data.get("question"),
        options=options,
        answer=coerce_int(data.get("answer"), "answer"),
        explanation=data.get("explanation"),
    )
    return jsonify({"status": "ok", "quiz_item": owner_payload(item)}), 201


@quiz_bp.route("/api/lectures/<int:lecture_id>/quiz-items", methods=["GET"])
@login_required
def list_items(lecture_id):
    lecture = get_owned_lecture(lecture_id, require_user_id())
    items = QuizItem.query.filter_by(lecture_id=lecture.id) \
        .order_by(QuizItem.created_at, QuizItem.id).all()
    return jsonify({"status": "ok", "quiz_items": [owner_payload(i) for i in items]})


@quiz_bp.route("/api/lectures/<int:lecture_id>/quiz-items/<int:quiz_item_id>/push", methods=["POST"])
@login_required
def push(lecture_id, quiz_item_id):
    delivered = push_quiz_item(lecture_id, quiz_item_id, require_user_id())
    item = get_quiz_item(quiz_item_id)
    return jsonify({
        "status": "ok",
        "delivered": delivered,
        "pushed_at": isoformat(item.pushed_at),
    })


@quiz_bp.route("/api/quiz/<int:lecture_id>/latest", methods=["GET"])
@login_required
def latest(lecture_id):
    ensure_audience_access(lecture_id, require_user_id())
    item = get_latest_pushed_quiz_item(lecture_id)
    return jsonify({"status": "ok", "quiz": public_payload(item) if item else None})
