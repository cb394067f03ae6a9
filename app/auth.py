"""Session and API key authentication.

Requests authenticate either with an `x-api-key` header or with the session
cookie set on sign-in. Only SHA-256 digests of session tokens and API keys
are stored.
"""

import logging
from datetime import timedelta, timezone
from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app import settings
from app.database import models
from app.database.config import get_db
from app.errors import UnauthorizedError
from app.security import generate_token, hash_token

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
API_KEY_PREFIX = "itk_"


async def create_session(db: AsyncSession, user: models.User, request: Request) -> tuple[models.Session, str]:
    """Start a session for `user` and return it along with the raw token."""
    token = generate_token()
    session = models.Session(
        token_hash=hash_token(token),
        user_id=user.id,
        expires_at=models.utcnow() + timedelta(seconds=settings.SESSION_TTL_SECONDS),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    db.add(session)
    await db.flush()
    return session, token


async def get_session_by_token(db: AsyncSession, token: str) -> Optional[models.Session]:
    """Return the live session for a raw token, deleting it if it has expired."""
    result = await db.execute(
        select(models.Session).where(models.Session.token_hash == hash_token(token))
    )
    session = result.scalars().first()
    if session is None:
        return None

    expires_at = session.expires_at
    if expires_at.tzinfo is None:
        # SQLite hands back naive values; they are stored as UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= models.utcnow():
        logger.info("Session expired", extra={"session_id": session.id})
        await db.delete(session)
        await db.commit()
        return None
    return session


async def delete_session(db: AsyncSession, token: str) -> None:
    await db.execute(delete(models.Session).where(models.Session.token_hash == hash_token(token)))
    await db.commit()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def generate_api_key() -> str:
    return API_KEY_PREFIX + generate_token()


async def get_user_by_api_key(db: AsyncSession, key: str) -> Optional[models.User]:
    result = await db.execute(select(models.ApiKey).where(models.ApiKey.key_hash == hash_token(key)))
    api_key = result.scalars().first()
    if api_key is None:
        return None

    api_key.last_used_at = models.utcnow()
    await db.commit()
    return api_key.user


async def get_current_session(
    request: Request, db: AsyncSession = Depends(get_db)
) -> models.Session:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise UnauthorizedError()

    session = await get_session_by_token(db, token)
    if session is None:
        raise UnauthorizedError("Session is invalid or has expired")
    return session


async def get_current_user(
    request: Request, db: AsyncSession = Depends(get_db)
) -> models.User:
    """Resolve the authenticated user, trying the API key before the cookie."""
    api_key = request.headers.get(API_KEY_HEADER)
    if api_key:
        user = await get_user_by_api_key(db, api_key)
        if user is None:
            logger.warning("Rejected invalid API key", extra={"path": request.url.path})
            raise UnauthorizedError("Invalid API key", code="INVALID_API_KEY")
        return user

    session = await get_current_session(request, db)
    return session.user
