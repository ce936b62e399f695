from __future__ import annotations

from bs4 import BeautifulSoup

from linksaver.core.exceptions import FetchError
from linksaver.core.models import Extraction

from .base import ContentKind, Extractor, normalize


class HypertextExtractor(Extractor):
    """HTML/XHTML pages: ``<title>``, meta description and the ``<body>`` markup."""

    kind = ContentKind.HYPERTEXT
    may_fail = True

    def extract(self, url: str, content_type: str, data: bytes) -> Extraction:
        soup = BeautifulSoup(data, "html.parser")

        title_tag = soup.find("title")
        title = title_tag.get_text() if title_tag is not None else ""
        if not title.strip():
            raise FetchError("no title found in HTML")

        meta = soup.find("meta", attrs={"name": "description"})
        description = meta.get("content", "") if meta is not None else ""
        if isinstance(description, list):
            description = " ".join(description)

        body_tag = soup.find("body")
        body = str(body_tag) if body_tag is not None else ""

        return normalize(title, description, body)


__all__ = ["HypertextExtractor"]
