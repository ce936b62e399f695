from __future__ import annotations

"""Database setup for SQLAlchemy with the async aiosqlite driver."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# The search index is an FTS5 virtual table and its delete rule a trigger;
# neither can be expressed through Base.metadata, so they are created here.
# Each statement is idempotent.
SEARCH_INDEX_DDL = (
    """
    CREATE VIRTUAL TABLE IF NOT EXISTS links_fts
    USING fts5(title, description, body)
    """,
    """
    CREATE TRIGGER IF NOT EXISTS links_ad AFTER DELETE ON links BEGIN
      DELETE FROM links_fts WHERE rowid = old.id;
    END
    """,
)


def create_engine(database_url: str, busy_timeout: float = 15.0) -> AsyncEngine:
    """Create an async engine for ``database_url``."""

    engine = create_async_engine(
        database_url,
        echo=False,
        connect_args={"timeout": busy_timeout},
    )
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def get_session(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine) -> None:
    """Create tables, the search index and its trigger if they are missing.

    Safe to call on every startup: an existing schema is left untouched.
    """

    # Import models to ensure Base.metadata is populated even when this module
    # is imported standalone.
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        for ddl in SEARCH_INDEX_DDL:
            await conn.execute(text(ddl))
    logger.info(
        "DB schema ensured",
        extra={"database": engine.url.render_as_string(hide_password=True)},
    )


__all__ = [
    "Base",
    "SEARCH_INDEX_DDL",
    "create_engine",
    "create_sessionmaker",
    "get_session",
    "init_db",
]
