import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name, default=None):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY")

    # Flask's own cookie session is unused; keep it off the "session" name
    SESSION_COOKIE_NAME = "flask_session"

    # Storage
    USERS_FILE = os.getenv("SUBTASKER_USERS_FILE", "users.json")
    PUBLIC_DIR = os.getenv("SUBTASKER_PUBLIC_DIR")

    # Session cookie
    SESSION_TOKEN_COOKIE = "session"
    REMEMBER_ME_DAYS = _env_int("SUBTASKER_REMEMBER_ME_DAYS", 30)
    SESSION_COOKIE_SECURE = _env_bool("SUBTASKER_COOKIE_SECURE")
    TOKEN_COOKIE_DOMAIN = os.getenv("SUBTASKER_COOKIE_DOMAIN") or None
    SESSION_SIGNING = _env_bool("SUBTASKER_SESSION_SIGNING")
    SESSION_MAX_AGE = _env_int("SUBTASKER_SESSION_MAX_AGE")

    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    LOG_LEVEL = os.getenv("SUBTASKER_LOG_LEVEL", "INFO")
    HOST = os.getenv("SUBTASKER_HOST", "127.0.0.1")
    PORT = _env_int("SUBTASKER_PORT", 3001)
