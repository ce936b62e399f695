"""SQLAlchemy ORM models for stored links and their search index."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, MetaData, String, Table, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class Link(Base):
    __tablename__ = "links"
    # AUTOINCREMENT keeps ids strictly increasing, even after deletes
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    url: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    added_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.current_timestamp()
    )


# FTS5 virtual table, created by ``init_db`` rather than ``create_all``; it
# lives in its own MetaData so ``create_all`` never emits a plain table for it.
link_index = Table(
    "links_fts",
    MetaData(),
    Column("rowid", Integer, primary_key=True),
    Column("title", Text),
    Column("description", Text),
    Column("body", Text),
    Column("rank", Float),
)


__all__ = ["Link", "link_index"]
