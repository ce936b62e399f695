"""Base exceptions for the domain layer."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain level exceptions."""


class ValidationError(DomainError):
    """Raised when user input fails domain validation rules."""


class InvalidURLError(ValidationError):
    """Raised when a submitted URL is malformed or targets a non-public host."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__("Invalid URL format. Must be a valid HTTP/HTTPS URL")


class FetchError(DomainError):
    """Raised when a URL cannot be loaded or yields no usable content."""

    def __str__(self) -> str:
        detail = super().__str__()
        return f"Failed to load URL: {detail}" if detail else "Failed to load URL"


class DuplicateError(DomainError):
    """Raised when a link with the same URL is already stored."""


class NotFoundError(DomainError):
    """Raised when an entity cannot be located."""


class StorageError(DomainError):
    """Opaque storage failure; the cause is logged, never shown to users."""


# Alias to keep a generic name for error type hints
Error = DomainError

__all__ = [
    "DomainError",
    "ValidationError",
    "InvalidURLError",
    "FetchError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    "Error",
]
