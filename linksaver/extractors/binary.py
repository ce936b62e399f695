from __future__ import annotations

from linksaver.core.models import Extraction

from .base import ContentKind, Extractor, normalize, title_from_url


class BinaryExtractor(Extractor):
    """Anything without a dedicated extractor: named after its URL, described
    by its content type, with nothing to index."""

    kind = ContentKind.BINARY

    def extract(self, url: str, content_type: str, data: bytes) -> Extraction:
        return normalize(title_from_url(url), content_type, "")


__all__ = ["BinaryExtractor"]
