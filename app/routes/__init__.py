"""API route modules for FastAPI endpoints."""

from app.routes.auth import router as auth_router
from app.routes.health import router as health_router
from app.routes.issues import router as issues_router
from app.routes.tags import router as tags_router
from app.routes.users import router as users_router

__all__ = ["auth_router", "health_router", "issues_router", "tags_router", "users_router"]
