import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app import settings
from app.database.config import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def root():
    return {"hello": "world"}


@router.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "timestamp": _now(), "version": settings.APP_VERSION}


@router.get("/health/live")
async def liveness():
    """The process is up and serving requests."""
    return {"status": "alive", "timestamp": _now()}


@router.get("/health/ready")
async def readiness(db: AsyncSession = Depends(get_db)):
    """Ready when the database answers a trivial query."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Readiness check failed: database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "timestamp": _now(), "checks": {"database": "error"}},
        )

    return {"status": "ready", "timestamp": _now(), "checks": {"database": "ok"}}


@router.get("/api/health")
async def api_health():
    return {"status": "ok", "timestamp": _now()}
