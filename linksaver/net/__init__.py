"""Network collaborators: URL guard, HTTP fetcher and browser session."""

from .guard import UrlGuard, build_guard
from .fetcher import FetchResult, HttpFetcher

__all__ = ["UrlGuard", "build_guard", "FetchResult", "HttpFetcher"]
