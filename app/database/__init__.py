"""Database configuration, models, and session management."""

from app.database.config import engine, Base, get_db, AsyncSessionLocal, SyncSessionLocal, sync_engine
from app.database import models

__all__ = ["engine", "Base", "get_db", "AsyncSessionLocal", "SyncSessionLocal", "sync_engine", "models"]
