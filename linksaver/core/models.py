"""Pydantic models representing core domain entities."""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

NOTE_URL_PREFIX = "note:"


def screenshot_filename(url: str) -> str:
    """Return the screenshot file name for ``url``.

    The name depends only on the URL, never on the numeric id.
    """
    return hashlib.sha256(url.encode("utf-8")).hexdigest() + ".png"


class Link(BaseModel):
    """A stored bookmark or note, as returned by the link store."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    title: str
    description: str = ""
    added_at: datetime

    @property
    def is_note(self) -> bool:
        return self.url.startswith(NOTE_URL_PREFIX)

    @property
    def display_description(self) -> str:
        return self.description or self.title

    @property
    def screenshot(self) -> str:
        return screenshot_filename(self.url)


class Extraction(BaseModel):
    """Normalized ``(title, description, body)`` triple produced from a page."""

    title: str
    description: str = ""
    body: str = ""


class LoadedPage(Extraction):
    """Extraction result plus an optional PNG screenshot of the page."""

    screenshot: Optional[bytes] = Field(default=None, repr=False)


__all__ = [
    "NOTE_URL_PREFIX",
    "Link",
    "Extraction",
    "LoadedPage",
    "screenshot_filename",
]
