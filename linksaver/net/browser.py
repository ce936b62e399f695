"""Shared headless-browser session used for rendering and screenshots.

The remote browser exposes one page. Navigations on it are not independent,
so :meth:`BrowserSession.capture` holds a lock for the whole
navigate/extract/screenshot sequence.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from linksaver.core.exceptions import FetchError
from linksaver.core.models import LoadedPage

logger = logging.getLogger(__name__)

VIEWPORT: Dict[str, int] = {"width": 800, "height": 600}
DESCRIPTION_JS = "document.querySelector(\"head meta[name='description']\").content"


class BrowserSession:
    """Process-wide handle on a remote Chromium reached over CDP."""

    def __init__(self, cdp_url: str, *, timeout: float = 15.0) -> None:
        self.cdp_url = cdp_url
        self.timeout = timeout
        self.timeout_ms = timeout * 1000
        self._lock = asyncio.Lock()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.connect_over_cdp(self.cdp_url)
        contexts = self._browser.contexts
        context = contexts[0] if contexts else await self._browser.new_context()
        self._page = await context.new_page()
        logger.info("Browser session started", extra={"cdp_url": self.cdp_url})

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        self._page = None

    # ------------------------------------------------------------------
    async def capture(self, url: str) -> LoadedPage:
        """Load ``url`` and return its raw title, description, body and PNG.

        Failing navigation, title retrieval or screenshot raise FetchError;
        description and body degrade to empty strings. The whole sequence
        shares one deadline, so a hung page releases the lock after
        ``timeout`` seconds.
        """
        if self._page is None:
            raise RuntimeError("browser session is not started")
        async with self._lock:
            try:
                return await asyncio.wait_for(self._capture(self._page, url), self.timeout)
            except asyncio.TimeoutError as exc:
                logger.warning("browser capture timed out", extra={"url": url})
                raise FetchError(f"timed out after {self.timeout:g}s") from exc

    async def _capture(self, page: Page, url: str) -> LoadedPage:
        try:
            response = await page.goto(url, timeout=self.timeout_ms)
        except PlaywrightError as exc:
            raise FetchError(f"failed to fetch URL: {exc.message}") from exc
        if response is None:
            raise FetchError("failed to fetch URL: no response")
        if response.status >= 400:
            raise FetchError(f"failed to fetch URL: {response.status} {response.status_text}")

        try:
            title = (await page.title()).strip()
        except PlaywrightError as exc:
            raise FetchError(f"failed to extract title: {exc.message}") from exc
        if not title:
            raise FetchError("no title found in HTML")

        description = await self._evaluate_text(page, DESCRIPTION_JS)

        try:
            body = await page.eval_on_selector("body", "el => el.outerHTML")
        except PlaywrightError as exc:
            logger.warning("failed to extract body", extra={"url": url, "reason": exc.message})
            body = ""

        try:
            await page.set_viewport_size(VIEWPORT)
            screenshot = await page.screenshot(
                type="png", full_page=True, timeout=self.timeout_ms
            )
        except PlaywrightError as exc:
            raise FetchError(f"failed to take screenshot: {exc.message}") from exc

        return LoadedPage(
            title=title,
            description=description,
            body=body or "",
            screenshot=screenshot,
        )

    @staticmethod
    async def _evaluate_text(page: Page, expression: str) -> str:
        try:
            value: Any = await page.evaluate(expression)
        except PlaywrightError:
            return ""
        return value.strip() if isinstance(value, str) else ""


__all__ = ["BrowserSession", "VIEWPORT"]
