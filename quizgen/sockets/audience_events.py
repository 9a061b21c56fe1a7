import logging
import threading

from flask import request
from flask_socketio import emit

from quizgen.errors import QuizGenError
from quizgen.routes.helpers import coerce_int
from quizgen.services.attempt_ledger import submit_attempt
from quizgen.services.broadcaster import ensure_audience_access
from quizgen.services.connection_registry import (
    CONNECTED_MESSAGE,
    SocketIOConnection,
    get_registry,
)
from quizgen.services.identity import require_user_id

logger = logging.getLogger(__name__)

# sid -> ConnectionHandle of the lecture that socket follows
socket_subscriptions = {}
_subscriptions_lock = threading.Lock()


def _drop_subscription(sid):
    with _subscriptions_lock:
        handle = socket_subscriptions.pop(sid, None)
    if handle:
        get_registry().unsubscribe(handle)
    return handle


def register_audience_events(socketio):

    @socketio.on("audience_subscribe")
    def handle_subscribe(data):
        sid = request.sid
        try:
            user_id = require_user_id()
            lecture_id = coerce_int((data or {}).get("lecture_id"), "lecture_id")
            ensure_audience_access(lecture_id, user_id)
        except QuizGenError as exc:
            emit("subscribe_error", exc.to_dict(), to=sid)
            return

        # One lecture per socket; re-subscribing replaces the old one
        _drop_subscription(sid)
        handle = get_registry().subscribe(lecture_id, user_id, SocketIOConnection(socketio, sid))
        with _subscriptions_lock:
            socket_subscriptions[sid] = handle
        emit(SocketIOConnection.EVENT, CONNECTED_MESSAGE, to=sid)

    @socketio.on("audience_unsubscribe")
    def handle_unsubscribe(data=None):
        _drop_subscription(request.sid)

    @socketio.on("disconnect")
    def handle_disconnect(reason=None):
        handle = _drop_subscription(request.sid)
        if handle:
            logger.debug("Socket %s left lecture %s (%s)", request.sid, handle.lecture_id, reason)

    @socketio.on("audience_submit_answer")
    def handle_submit_answer(data):
        data = data or {}
        try:
            result = submit_attempt(
                coerce_int(data.get("quiz_item_id"), "quiz_item_id"),
                require_user_id(),
                coerce_int(data.get("selected_option"), "selected_option"),
                latency_ms=coerce_int(data.get("latency_ms"), "latency_ms", required=False),
            )
        except QuizGenError as exc:
            emit("answer_error", exc.to_dict(), to=request.sid)
            return
        emit("answer_result", result.to_dict(), to=request.sid)
