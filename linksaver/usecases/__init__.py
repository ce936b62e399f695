"""Application use cases: ingestion and link management."""

from .ingest import Ingest, IngestResult, PseudoUrlFactory, Stage, Submission
from .links import DeleteLink, EditLink, ListLinks

__all__ = [
    "Ingest",
    "IngestResult",
    "PseudoUrlFactory",
    "Stage",
    "Submission",
    "DeleteLink",
    "EditLink",
    "ListLinks",
]
