import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import settings
from app.database.config import engine, Base
from app.errors import register_exception_handlers
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.timing import timing_middleware
from app.routes import auth_router, health_router, issues_router, tags_router, users_router
from contextlib import asynccontextmanager


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    # Shutdown: Dispose of the engine
    await engine.dispose()


app = FastAPI(title="Issue Tracker API", version=settings.APP_VERSION, lifespan=lifespan)

register_exception_handlers(app)

app.middleware("http")(timing_middleware)
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(
        RateLimitMiddleware,
        default_limit=settings.RATE_LIMIT,
        auth_limit=settings.AUTH_RATE_LIMIT,
    )
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-API-Key"],
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(levelname)s | %(name)s | %(message)s",
)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(tags_router)
app.include_router(issues_router)
