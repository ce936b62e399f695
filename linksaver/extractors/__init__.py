"""Content extractors, one per content kind."""

from typing import Dict

from .base import ContentKind, Extractor, classify, normalize, title_from_url
from .binary import BinaryExtractor
from .document import DocumentExtractor
from .hypertext import HypertextExtractor

EXTRACTORS: Dict[ContentKind, Extractor] = {
    ContentKind.HYPERTEXT: HypertextExtractor(),
    ContentKind.DOCUMENT: DocumentExtractor(),
    ContentKind.BINARY: BinaryExtractor(),
}


def extractor_for(content_type: str) -> Extractor:
    """Select the extractor for a response's declared content type."""
    return EXTRACTORS[classify(content_type)]


__all__ = [
    "ContentKind",
    "Extractor",
    "EXTRACTORS",
    "BinaryExtractor",
    "DocumentExtractor",
    "HypertextExtractor",
    "classify",
    "extractor_for",
    "normalize",
    "title_from_url",
]
