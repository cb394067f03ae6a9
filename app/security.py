"""Password hashing and opaque token helpers."""

import hashlib
import secrets
from typing import Optional

import bcrypt

from app import settings

# Used to keep sign-in timing uniform when the email is unknown
_DUMMY_HASH = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))


def _encode(password: str) -> bytes:
    # bcrypt only considers the first 72 bytes of a password
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored bcrypt hash.

    A comparison is always performed, even when there is no stored hash.
    """
    if not password_hash:
        bcrypt.checkpw(_encode(password), _DUMMY_HASH)
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_token(nbytes: int = 32) -> str:
    return secrets.token_urlsafe(nbytes)


def hash_token(token: str) -> str:
    """Digest stored in place of session tokens and API keys."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
