import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "quizgen-dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///quizgen.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Optional engine options for better PostgreSQL behavior under concurrency
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 5))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 10))
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": DB_POOL_SIZE,
        "max_overflow": DB_MAX_OVERFLOW,
    }

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Live delivery
    HEARTBEAT_ENABLED = _env_bool("HEARTBEAT_ENABLED", True)
    HEARTBEAT_INTERVAL_SECONDS = float(os.getenv("HEARTBEAT_INTERVAL_SECONDS", 30))
    CONNECTION_QUEUE_SIZE = int(os.getenv("CONNECTION_QUEUE_SIZE", 100))
    RECOVERY_WINDOW_SECONDS = int(os.getenv("RECOVERY_WINDOW_SECONDS", 300))

    # Status polling fallback (~5 minutes with the defaults)
    STATUS_POLL_INTERVAL_SECONDS = float(os.getenv("STATUS_POLL_INTERVAL_SECONDS", 3))
    STATUS_POLL_MAX_CHECKS = int(os.getenv("STATUS_POLL_MAX_CHECKS", 100))
