import logging
import socket

from flask import Flask, jsonify

from config import Config
from extensions import db, socketio
from quizgen.errors import QuizGenError
from quizgen.logging_config import configure_logging
from quizgen.routes import register_routes
from quizgen.services.connection_registry import ConnectionRegistry
from quizgen.services.heartbeat import HeartbeatService
from quizgen.sockets import register_sockets

logger = logging.getLogger("quizgen")


def handle_quizgen_error(exc):
    return jsonify(exc.to_dict()), exc.status_code


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    socketio.init_app(app)

    registry = ConnectionRegistry()
    app.extensions["quizgen.registry"] = registry
    heartbeat = HeartbeatService(registry, socketio, interval=app.config["HEARTBEAT_INTERVAL_SECONDS"])
    app.extensions["quizgen.heartbeat"] = heartbeat

    register_routes(app)
    register_sockets(socketio)
    app.register_error_handler(QuizGenError, handle_quizgen_error)

    with app.app_context():
        from quizgen import models  # noqa: F401  (register tables)
        db.create_all()

    if app.config.get("HEARTBEAT_ENABLED"):
        heartbeat.start()

    return app


if __name__ == "__main__":
    app = create_app()
    ip = socket.gethostbyname(socket.gethostname())
    logger.info("QuizGen ready on %s:5000", ip)
    socketio.run(app, host="0.0.0.0", port=5000, allow_unsafe_werkzeug=True)
