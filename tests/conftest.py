import pytest

from app import create_app
from config import Config
from extensions import db
from quizgen.models import Participant
from quizgen.services.lecture_service import create_lecture
from quizgen.services.quiz_item_service import create_quiz_item

OPTIONS = ["B-tree", "Hash map", "Heap", "Trie"]


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'quizgen-test.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}
        HEARTBEAT_ENABLED = False
        LOG_LEVEL = "WARNING"
        STATUS_POLL_INTERVAL_SECONDS = 0
        STATUS_POLL_MAX_CHECKS = 3

    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def registry(app):
    return app.extensions["quizgen.registry"]


@pytest.fixture
def make_lecture(ctx):
    def make(owner_id="speaker", status="in_progress", title="Storage engines"):
        lecture = create_lecture(owner_id, title)
        lecture.status = status
        db.session.commit()
        return lecture
    return make


@pytest.fixture
def add_participant(ctx):
    def add(lecture, user_id):
        db.session.add(Participant(lecture_id=lecture.id, user_id=user_id))
        db.session.commit()
    return add


@pytest.fixture
def make_quiz_item(ctx):
    def make(lecture, answer=2, question="Which structure backs most SQL indexes?", options=None):
        return create_quiz_item(lecture.id, lecture.owner_id, question, options or OPTIONS, answer)
    return make


@pytest.fixture
def login():
    def sign_in(client, user_id):
        response = client.post("/api/session", json={"user_id": user_id})
        assert response.status_code == 200
        return client
    return sign_in
