"""Core library exposing domain models, settings, exceptions and text limits."""

from .settings import Settings, get_settings
from .exceptions import (
    DomainError,
    DuplicateError,
    Error,
    FetchError,
    InvalidURLError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .models import Extraction, Link, LoadedPage, screenshot_filename

__all__ = [
    "Settings",
    "get_settings",
    "DomainError",
    "DuplicateError",
    "Error",
    "FetchError",
    "InvalidURLError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "Extraction",
    "Link",
    "LoadedPage",
    "screenshot_filename",
]
