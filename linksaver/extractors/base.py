from __future__ import annotations

import enum
import posixpath
from abc import ABC, abstractmethod
from urllib.parse import unquote, urlsplit

from linksaver.core.models import Extraction
from linksaver.core.text import cap_body, truncate_description, truncate_title


class ContentKind(enum.Enum):
    """Closed set of content categories an extractor exists for."""

    HYPERTEXT = "hypertext"
    DOCUMENT = "document"
    BINARY = "binary"


_HYPERTEXT_TYPES = frozenset({"text/html", "application/xhtml+xml"})
_DOCUMENT_TYPES = frozenset({"application/pdf"})


def media_type(content_type: str) -> str:
    """``'text/html; charset=utf-8'`` -> ``'text/html'``."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def classify(content_type: str) -> ContentKind:
    mtype = media_type(content_type)
    if mtype in _HYPERTEXT_TYPES:
        return ContentKind.HYPERTEXT
    if mtype in _DOCUMENT_TYPES:
        return ContentKind.DOCUMENT
    return ContentKind.BINARY


def title_from_url(url: str) -> str:
    """Last non-empty path segment of ``url``, or its host for a bare domain."""
    parts = urlsplit(url)
    segment = unquote(posixpath.basename(parts.path.rstrip("/"))).strip()
    if segment:
        return segment
    return parts.netloc.rpartition("@")[2]


def normalize(title: str, description: str = "", body: str | bytes | None = "") -> Extraction:
    """Apply the stored-field limits to an extracted triple."""
    return Extraction(
        title=truncate_title(title),
        description=truncate_description(description),
        body=cap_body(body),
    )


class Extractor(ABC):
    """Turns fetched bytes of one content kind into a normalized extraction."""

    kind: ContentKind
    # Only hypertext may reject a submission; the others always degrade.
    may_fail: bool = False

    @abstractmethod
    def extract(self, url: str, content_type: str, data: bytes) -> Extraction:
        """Return the normalized ``(title, description, body)`` for ``data``."""


__all__ = [
    "ContentKind",
    "Extractor",
    "classify",
    "media_type",
    "normalize",
    "title_from_url",
]
