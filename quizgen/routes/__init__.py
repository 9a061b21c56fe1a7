from .session_routes import session_bp
from .lecture_routes import lecture_bp
from .quiz_routes import quiz_bp
from .attempt_routes import attempt_bp
from .stream_routes import stream_bp


def register_routes(app):
    app.register_blueprint(session_bp)
    app.register_blueprint(lecture_bp, url_prefix="/api/lectures")
    app.register_blueprint(quiz_bp)
    app.register_blueprint(attempt_bp)
    app.register_blueprint(stream_bp)
