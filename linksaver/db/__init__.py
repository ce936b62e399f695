"""Database utilities for LinkSaver."""

from . import models
from .database import create_engine, create_sessionmaker, get_session, init_db
from .store import LinkStore

__all__ = [
    "models",
    "create_engine",
    "create_sessionmaker",
    "get_session",
    "init_db",
    "LinkStore",
]
