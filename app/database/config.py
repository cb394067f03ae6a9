import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import NullPool

from app import settings  # noqa: F401  (loads .env before the URLs are read)

# Get database URLs from environment or use defaults
ASYNC_DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite+aiosqlite:///./database.sqlite"
)
SYNC_DATABASE_URL = os.getenv(
    "SYNC_DATABASE_URL",
    "sqlite:///./database.sqlite"
)


def _engine_options(url: str) -> dict:
    # SQLite connections are cheap and must not be shared across event loops
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {}


# Create async engine for FastAPI
engine = create_async_engine(
    ASYNC_DATABASE_URL,
    echo=False,
    **_engine_options(ASYNC_DATABASE_URL),
)

# Create async session factory for FastAPI
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Create synchronous engine for Celery tasks and scripts
sync_engine = create_engine(SYNC_DATABASE_URL, echo=False, **_engine_options(SYNC_DATABASE_URL))

# Create synchronous session factory for Celery tasks and scripts
SyncSessionLocal = sessionmaker(bind=sync_engine, expire_on_commit=False)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite leaves foreign key enforcement off unless asked per connection."""
    if "sqlite" not in type(dbapi_connection).__module__:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Base class for models
class Base(DeclarativeBase):
    pass


# Dependency to get DB session
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
