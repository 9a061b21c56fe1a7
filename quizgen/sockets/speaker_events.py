from flask import request
from flask_socketio import emit

from quizgen.errors import QuizGenError
from quizgen.routes.helpers import coerce_int
from quizgen.services.broadcaster import push_quiz_item
from quizgen.services.identity import require_user_id


def register_speaker_events(socketio):

    @socketio.on("speaker_push_quiz")
    def handle_push_quiz(data):
        data = data or {}
        try:
            lecture_id = coerce_int(data.get("lecture_id"), "lecture_id")
            quiz_item_id = coerce_int(data.get("quiz_item_id"), "quiz_item_id")
            delivered = push_quiz_item(lecture_id, quiz_item_id, require_user_id())
        except QuizGenError as exc:
            emit("speaker_push_error", exc.to_dict(), to=request.sid)
            return
        emit("speaker_push_ack", {
            "lecture_id": lecture_id,
            "quiz_item_id": quiz_item_id,
            "delivered": delivered,
        }, to=request.sid)
