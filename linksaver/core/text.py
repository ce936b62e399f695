"""Length limits applied to every extracted field before it is stored."""

from __future__ import annotations

MAX_TITLE_LENGTH = 250
MAX_DESCRIPTION_LENGTH = 1020
MAX_BODY_BYTES = 1_000_000

ELLIPSIS = "..."


def truncate(text: str, limit: int) -> str:
    """Trim ``text`` and cut it to ``limit`` characters plus ``...``."""
    text = (text or "").strip()
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def truncate_title(title: str) -> str:
    return truncate(title, MAX_TITLE_LENGTH)


def truncate_description(description: str) -> str:
    return truncate(description, MAX_DESCRIPTION_LENGTH)


def cap_body(body: str | bytes | None, limit: int = MAX_BODY_BYTES) -> str:
    """Return ``body`` as text no longer than ``limit`` UTF-8 bytes.

    The cut never splits a multi-byte character and adds no marker.
    """
    if not body:
        return ""
    if isinstance(body, str):
        raw = body.encode("utf-8")
    else:
        raw = bytes(body)
    return raw[:limit].decode("utf-8", errors="ignore")


__all__ = [
    "MAX_TITLE_LENGTH",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_BODY_BYTES",
    "truncate",
    "truncate_title",
    "truncate_description",
    "cap_body",
]
