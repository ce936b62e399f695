"""Link store: the ``links`` table plus its FTS5 search index.

Every write touching both structures runs in one transaction. Deleting a row
removes its index entry through the ``links_ad`` trigger, so the two stay in
step even when rows are deleted outside this class.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import List

from sqlalchemy import delete, insert, literal_column, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from linksaver.core.exceptions import (
    DomainError,
    DuplicateError,
    NotFoundError,
    StorageError,
)
from linksaver.core.models import Link

from . import models
from .database import create_sessionmaker, get_session, init_db

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def match_expression(query: str) -> str:
    """Turn free text into an FTS5 query of quoted tokens (implicit AND).

    Quoting keeps FTS5 operators and punctuation in user input from being
    parsed as query syntax.
    """
    tokens = _TOKEN_RE.findall(query or "")
    return " ".join(f'"{token}"' for token in tokens)


def _is_duplicate_url(exc: IntegrityError) -> bool:
    return "UNIQUE constraint failed: links.url" in str(exc.orig)


class LinkStore:
    """CRUD and search operations over stored links."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.sessionmaker = create_sessionmaker(engine)

    async def init(self) -> None:
        """Create the schema; a no-op when it already exists."""
        try:
            await init_db(self.engine)
        except SQLAlchemyError as exc:
            logger.exception("DB schema init failed")
            raise StorageError("schema init failed") from exc

    async def ping(self) -> None:
        """Round-trip to the database; StorageError when it is unusable."""
        async with self._transaction("ping") as session:
            await session.execute(select(literal_column("1")))

    # ------------------------------------------------------------------
    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with get_session(self.sessionmaker) as session:
                yield session
        except DomainError:
            raise
        except IntegrityError as exc:
            if _is_duplicate_url(exc):
                raise DuplicateError("URL already exists") from exc
            logger.exception("Storage operation failed", extra={"operation": operation})
            raise StorageError(f"{operation} failed") from exc
        except SQLAlchemyError as exc:
            logger.exception("Storage operation failed", extra={"operation": operation})
            raise StorageError(f"{operation} failed") from exc

    # ------------------------------------------------------------------
    async def add(self, url: str, title: str, description: str, body: str) -> int:
        """Insert a link and its index entry; return the new id.

        A duplicate ``url`` raises :class:`DuplicateError` and nothing is
        written.
        """
        async with self._transaction("add") as session:
            link = models.Link(url=url, title=title, description=description)
            session.add(link)
            await session.flush()
            await session.execute(
                insert(models.link_index).values(
                    rowid=link.id,
                    title=title,
                    description=description,
                    body=body,
                )
            )
            link_id = link.id
        logger.info("link_added", extra={"link_id": link_id, "url": url})
        return link_id

    async def get(self, link_id: int) -> Link:
        async with self._transaction("get") as session:
            row = await session.get(models.Link, link_id)
            if row is None:
                raise NotFoundError(f"Link {link_id} not found")
            return Link.model_validate(row)

    async def get_all(self) -> List[Link]:
        """Return all links, newest first."""
        stmt = select(models.Link).order_by(
            models.Link.added_at.desc(), models.Link.id.desc()
        )
        async with self._transaction("get_all") as session:
            res = await session.execute(stmt)
            return [Link.model_validate(row) for row in res.scalars().all()]

    async def search(self, query: str) -> List[Link]:
        """Return links matching ``query``, most relevant first."""
        expression = match_expression(query)
        if not expression:
            return []
        index = models.link_index
        stmt = (
            select(models.Link)
            .select_from(index)
            .join(models.Link, models.Link.id == index.c.rowid)
            .where(literal_column("links_fts").op("MATCH")(expression))
            .order_by(index.c.rank, models.Link.id.desc())
        )
        async with self._transaction("search") as session:
            res = await session.execute(stmt)
            return [Link.model_validate(row) for row in res.scalars().all()]

    async def update(self, link_id: int, title: str, description: str) -> None:
        """Update title and description of the row and its index entry."""
        async with self._transaction("update") as session:
            res = await session.execute(
                update(models.Link)
                .where(models.Link.id == link_id)
                .values(title=title, description=description)
            )
            if res.rowcount == 0:
                raise NotFoundError(f"Link {link_id} not found")
            await session.execute(
                update(models.link_index)
                .where(models.link_index.c.rowid == link_id)
                .values(title=title, description=description)
            )
        logger.info("link_updated", extra={"link_id": link_id})

    async def delete(self, link_id: int) -> None:
        async with self._transaction("delete") as session:
            res = await session.execute(
                delete(models.Link).where(models.Link.id == link_id)
            )
            if res.rowcount == 0:
                raise NotFoundError(f"Link {link_id} not found")
        logger.info("link_deleted", extra={"link_id": link_id})


__all__ = ["LinkStore", "match_expression"]
