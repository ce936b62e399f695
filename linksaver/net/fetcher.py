"""Plain HTTP retrieval with bounded time and size."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx

from linksaver.core.exceptions import FetchError, InvalidURLError
from linksaver.core.settings import Settings
from linksaver.core.text import MAX_BODY_BYTES

from .guard import UrlGuard

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/pdf;q=0.9,*/*;q=0.8",
    "Upgrade-Insecure-Requests": "1",
}


@dataclass
class FetchResult:
    """Outcome of a successful retrieval; ``body`` never exceeds the cap."""

    url: str
    status: int
    content_type: str
    body: bytes


class HttpFetcher:
    """Fetch a URL once, following redirects only to addresses the guard allows."""

    def __init__(
        self,
        guard: UrlGuard,
        *,
        timeout: float = 10.0,
        connect_timeout: float = 5.0,
        max_redirects: int = 5,
        max_bytes: int = MAX_BODY_BYTES,
        user_agent: str = "LinkSaver/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.guard = guard
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.max_bytes = max_bytes
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            headers={**DEFAULT_HEADERS, "User-Agent": user_agent},
            follow_redirects=False,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, guard: UrlGuard) -> "HttpFetcher":
        return cls(
            guard,
            timeout=settings.fetch_timeout,
            connect_timeout=settings.fetch_connect_timeout,
            max_redirects=settings.max_redirects,
            user_agent=settings.user_agent,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    # ------------------------------------------------------------------
    async def fetch(self, url: str) -> FetchResult:
        """Retrieve ``url``; raise FetchError on any failure. No retries."""
        try:
            return await asyncio.wait_for(self._fetch(url), self.timeout)
        except asyncio.TimeoutError as exc:
            raise FetchError(f"timed out after {self.timeout:g}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(str(exc) or exc.__class__.__name__) from exc

    async def _fetch(self, url: str) -> FetchResult:
        for _ in range(self.max_redirects + 1):
            async with self.client.stream("GET", url) as resp:
                if resp.is_redirect:
                    location = resp.headers.get("location", "")
                    # Every hop is checked again; a public page may redirect
                    # to an internal address.
                    try:
                        url = await self.guard.validate(urljoin(url, location))
                    except InvalidURLError as exc:
                        raise FetchError(f"redirect not allowed: {exc.reason}") from exc
                    continue
                if not resp.is_success:
                    raise FetchError(f"HTTP error: {resp.status_code}")
                body = await self._read_capped(resp)
                logger.debug(
                    "fetched",
                    extra={"url": url, "status": resp.status_code, "bytes": len(body)},
                )
                return FetchResult(
                    url=url,
                    status=resp.status_code,
                    content_type=resp.headers.get("content-type", ""),
                    body=body,
                )
        raise FetchError("too many redirects")

    async def _read_capped(self, resp: httpx.Response) -> bytes:
        data = bytearray()
        async for chunk in resp.aiter_bytes():
            data.extend(chunk[: self.max_bytes - len(data)])
            if len(data) >= self.max_bytes:
                # Leaving the stream context closes the connection; the rest
                # of the body is never read.
                break
        return bytes(data)


__all__ = ["FetchResult", "HttpFetcher"]
