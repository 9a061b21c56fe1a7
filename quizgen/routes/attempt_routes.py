from flask import Blueprint, jsonify, request

from quizgen.errors import InvalidInputError
from quizgen.routes.helpers import coerce_int, get_json_body
from quizgen.services.analytics_service import (
    get_lecture_quiz_analytics,
    get_lecture_stats,
    get_quiz_item_stats,
)
from quizgen.services.attempt_ledger import submit_attempt
from quizgen.services.identity import login_required, require_user_id

attempt_bp = Blueprint("attempts", __name__)


@attempt_bp.route("/api/attempts", methods=["POST"])
@login_required
def submit():
    data = get_json_body()
    result = submit_attempt(
        coerce_int(data.get("quiz_item_id"), "quiz_item_id"),
        require_user_id(),
        coerce_int(data.get("selected_option"), "selected_option"),
        latency_ms=coerce_int(data.get("latency_ms"), "latency_ms", required=False),
    )
    body = {"status": "ok"}
    body.update(result.to_dict())
    return jsonify(body), 201


@attempt_bp.route("/api/attempts/stats", methods=["GET"])
@login_required
def stats():
    user_id = require_user_id()
    quiz_item_id = coerce_int(request.args.get("quiz_item_id"), "quiz_item_id", required=False)
    lecture_id = coerce_int(request.args.get("lecture_id"), "lecture_id", required=False)

    if quiz_item_id is not None:
        return jsonify({"status": "ok", "stats": get_quiz_item_stats(quiz_item_id, user_id)})
    if lecture_id is not None:
        return jsonify({"status": "ok", "stats": get_lecture_stats(lecture_id, user_id)})
    raise InvalidInputError("Specify quiz_item_id or lecture_id.")


@attempt_bp.route("/api/lectures/<int:lecture_id>/analytics", methods=["GET"])
@login_required
def lecture_analytics(lecture_id):
    data = get_lecture_quiz_analytics(lecture_id, require_user_id())
    return jsonify({"status": "ok", "quiz_items": data})
