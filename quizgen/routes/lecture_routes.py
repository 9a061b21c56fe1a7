from flask import Blueprint, jsonify

from quizgen.routes.helpers import get_json_body
from quizgen.services.broadcaster import ensure_audience_access
from quizgen.services.identity import login_required, require_user_id
from quizgen.services.lecture_service import (
    change_status,
    create_lecture,
    join_lecture_by_code,
)

lecture_bp = Blueprint("lectures", __name__)


@lecture_bp.route("", methods=["POST"])
@login_required
def create():
    lecture = create_lecture(require_user_id(), get_json_body().get("title"))
    return jsonify({"status": "ok", "lecture": lecture.to_dict()}), 201


@lecture_bp.route("/<int:lecture_id>", methods=["GET"])
@login_required
def detail(lecture_id):
    user_id = require_user_id()
    lecture = ensure_audience_access(lecture_id, user_id)
    data = lecture.to_dict()
    data["is_owner"] = lecture.owner_id == user_id
    return jsonify({"status": "ok", "lecture": data})


@lecture_bp.route("/<int:lecture_id>/status", methods=["POST"])
@login_required
def update_status(lecture_id):
    new_status = str(get_json_body().get("status") or "")
    lecture = change_status(lecture_id, require_user_id(), new_status)
    return jsonify({"status": "ok", "lecture": lecture.to_dict()})


@lecture_bp.route("/join", methods=["POST"])
@login_required
def join():
    lecture = join_lecture_by_code(require_user_id(), get_json_body().get("join_code"))
    data = lecture.to_dict()
    data.pop("join_code", None)
    return jsonify({"status": "ok", "lecture": data})
