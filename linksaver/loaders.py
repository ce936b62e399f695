"""Page loaders: turn a validated URL into a normalized page.

Two implementations share one interface. ``HttpPageLoader`` fetches with a
plain HTTP client and dispatches on content type; ``BrowserPageLoader``
renders in the shared browser session and also returns a screenshot. Which
one runs is decided once at startup by :func:`build_page_loader`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from linksaver.core.models import LoadedPage
from linksaver.core.settings import Settings
from linksaver.extractors import extractor_for, normalize
from linksaver.net.browser import BrowserSession
from linksaver.net.fetcher import FetchResult, HttpFetcher
from linksaver.net.guard import UrlGuard

T = TypeVar("T")


class PageLoader(ABC, Generic[T]):
    """Retrieve a page, then reduce it to normalized title, description and body."""

    @abstractmethod
    async def fetch(self, url: str) -> T:
        """Retrieve ``url``; raise FetchError when it cannot be loaded."""

    @abstractmethod
    def extract(self, url: str, fetched: T) -> LoadedPage:
        """Normalize a retrieved page; raise FetchError if it has no usable title."""

    async def load(self, url: str) -> LoadedPage:
        return self.extract(url, await self.fetch(url))

    async def aclose(self) -> None:
        """Release network resources held by the loader."""


class HttpPageLoader(PageLoader[FetchResult]):
    def __init__(self, fetcher: HttpFetcher) -> None:
        self.fetcher = fetcher

    async def fetch(self, url: str) -> FetchResult:
        return await self.fetcher.fetch(url)

    def extract(self, url: str, fetched: FetchResult) -> LoadedPage:
        extraction = extractor_for(fetched.content_type).extract(
            url, fetched.content_type, fetched.body
        )
        return LoadedPage(**extraction.model_dump())

    async def aclose(self) -> None:
        await self.fetcher.aclose()


class BrowserPageLoader(PageLoader[LoadedPage]):
    def __init__(self, session: BrowserSession) -> None:
        self.session = session

    async def fetch(self, url: str) -> LoadedPage:
        return await self.session.capture(url)

    def extract(self, url: str, fetched: LoadedPage) -> LoadedPage:
        extraction = normalize(fetched.title, fetched.description, fetched.body)
        return LoadedPage(**extraction.model_dump(), screenshot=fetched.screenshot)

    async def aclose(self) -> None:
        await self.session.close()


async def build_page_loader(settings: Settings, guard: UrlGuard) -> PageLoader:
    """Pick the browser path when a browser endpoint is configured."""
    if settings.browser_cdp_url:
        session = BrowserSession(settings.browser_cdp_url, timeout=settings.browser_timeout)
        await session.start()
        return BrowserPageLoader(session)
    return HttpPageLoader(HttpFetcher.from_settings(settings, guard))


__all__ = [
    "PageLoader",
    "HttpPageLoader",
    "BrowserPageLoader",
    "build_page_loader",
]
