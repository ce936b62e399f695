from __future__ import annotations

import logging
from typing import List

from linksaver.core.exceptions import ValidationError
from linksaver.core.models import Link
from linksaver.core.text import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH
from linksaver.db import LinkStore
from linksaver.storage import ScreenshotStorage

logger = logging.getLogger(__name__)


class ListLinks:
    """All links newest first, or full-text search results when a query is given."""

    def __init__(self, store: LinkStore) -> None:
        self.store = store

    async def __call__(self, query: str = "") -> List[Link]:
        if query.strip():
            return await self.store.search(query)
        return await self.store.get_all()


class EditLink:
    """Change the title and description of a stored link."""

    def __init__(self, store: LinkStore) -> None:
        self.store = store

    async def __call__(self, link_id: int, title: str, description: str = "") -> Link:
        title = (title or "").strip()
        if not title:
            raise ValidationError("title is required")
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"title is too long, max {MAX_TITLE_LENGTH} characters allowed"
            )
        description = (description or "").strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"description is too long, max {MAX_DESCRIPTION_LENGTH} characters allowed"
            )
        await self.store.update(link_id, title, description)
        return await self.store.get(link_id)


class DeleteLink:
    """Delete a link and, best-effort, its screenshot."""

    def __init__(self, store: LinkStore, screenshots: ScreenshotStorage) -> None:
        self.store = store
        self.screenshots = screenshots

    async def __call__(self, link_id: int) -> None:
        link = await self.store.get(link_id)
        await self.store.delete(link_id)
        if not link.is_note:
            self.screenshots.delete(link.url)


__all__ = ["ListLinks", "EditLink", "DeleteLink"]
