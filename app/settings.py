"""Application settings read from the environment.

Values are loaded from a `.env` file first (if present), then from the process
environment, which always wins.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


APP_VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = _get_list("CORS_ORIGINS", "http://localhost:5173,http://localhost:5174")

# Sessions
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session_token")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(7 * 24 * 60 * 60)))
SESSION_COOKIE_SECURE = _get_bool("SESSION_COOKIE_SECURE", False)

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Rate limiting, in `limits` notation ("100/minute", "20 per minute", ...)
RATE_LIMIT_ENABLED = _get_bool("RATE_LIMIT_ENABLED", True)
RATE_LIMIT = os.getenv("RATE_LIMIT", "100/minute")
AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "20/minute")

