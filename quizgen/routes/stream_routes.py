from flask import Blueprint, Response, current_app, stream_with_context

from quizgen.routes.helpers import SSE_HEADERS, sse_event
from quizgen.services.broadcaster import ensure_audience_access
from quizgen.services.connection_registry import (
    CONNECTED_MESSAGE,
    QueueConnection,
    get_registry,
)
from quizgen.services.identity import login_required, require_user_id
from quizgen.services.status_poller import poll_lecture_status

stream_bp = Blueprint("stream", __name__)


@stream_bp.route("/api/sse/<int:lecture_id>")
@login_required
def lecture_stream(lecture_id):
    """Live feed of a lecture: connected, then heartbeats and pushed quiz items."""
    user_id = require_user_id()
    ensure_audience_access(lecture_id, user_id)

    registry = get_registry()
    queue_size = current_app.config["CONNECTION_QUEUE_SIZE"]
    wait = current_app.config["HEARTBEAT_INTERVAL_SECONDS"]

    def generate():
        connection = QueueConnection(maxsize=queue_size)
        handle = registry.subscribe(lecture_id, user_id, connection)
        try:
            yield sse_event(CONNECTED_MESSAGE)
            while not connection.closed:
                payload = connection.receive(timeout=wait)
                if payload is not None:
                    yield sse_event(payload)
        finally:
            # Runs when the client goes away and the server closes the generator
            registry.unsubscribe(handle)

    return Response(generate(), mimetype="text/event-stream", headers=SSE_HEADERS)


@stream_bp.route("/api/lectures/<int:lecture_id>/status/stream")
@login_required
def lecture_status_stream(lecture_id):
    ensure_audience_access(lecture_id, require_user_id())
    events = poll_lecture_status(
        lecture_id,
        interval=current_app.config["STATUS_POLL_INTERVAL_SECONDS"],
        max_checks=current_app.config["STATUS_POLL_MAX_CHECKS"],
    )
    body = stream_with_context(sse_event(event) for event in events)
    return Response(body, mimetype="text/event-stream", headers=SSE_HEADERS)
