from flask import Blueprint, jsonify, session

from quizgen.errors import InvalidInputError
from quizgen.routes.helpers import get_json_body

session_bp = Blueprint("session", __name__)


# Development sign-in. In production the identity provider fills session["user_id"].
@session_bp.route("/api/session", methods=["POST"])
def sign_in():
    user_id = str(get_json_body().get("user_id") or "").strip()
    if not user_id:
        raise InvalidInputError("user_id is required.")
    session["user_id"] = user_id
    return jsonify({"status": "ok", "user_id": user_id})


@session_bp.route("/api/session", methods=["DELETE"])
def sign_out():
    session.pop("user_id", None)
    return jsonify({"status": "ok"})
