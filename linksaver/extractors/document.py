from __future__ import annotations

import io
import logging
from typing import Iterator, List

from pypdf import PdfReader

from linksaver.core.models import Extraction
from linksaver.core.text import MAX_BODY_BYTES

from .base import ContentKind, Extractor, normalize, title_from_url

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "PDF"


def _rows(text: str) -> Iterator[str]:
    for line in text.splitlines():
        line = line.strip()
        if line:
            yield line


class DocumentExtractor(Extractor):
    """PDF documents.

    The first two non-empty text rows become title and description; the
    extracted text of all pages, up to the body cap, is the body. A file that
    cannot be read as a PDF still yields a record titled after its URL.
    """

    kind = ContentKind.DOCUMENT

    def extract(self, url: str, content_type: str, data: bytes) -> Extraction:
        try:
            return self._extract(url, data)
        except Exception as exc:  # noqa: BLE001 - pypdf raises many types on malformed input
            logger.warning(
                "pdf_unreadable",
                extra={"url": url, "reason": f"{exc.__class__.__name__}: {exc}"},
            )
            return normalize(title_from_url(url), FALLBACK_DESCRIPTION, "")

    def _extract(self, url: str, data: bytes) -> Extraction:
        reader = PdfReader(io.BytesIO(data))

        title = ""
        description = ""
        parts: List[str] = []
        size = 0
        for page in reader.pages:
            text = page.extract_text() or ""
            if not (title and description):
                for row in _rows(text):
                    if not title:
                        title = row
                    elif not description:
                        description = row
                    else:
                        break
            parts.append(text)
            size += len(text.encode("utf-8")) + 1
            if size >= MAX_BODY_BYTES:
                break

        if not title:
            title = title_from_url(url)
        return normalize(title, description, "\n".join(parts))


__all__ = ["DocumentExtractor", "FALLBACK_DESCRIPTION"]
