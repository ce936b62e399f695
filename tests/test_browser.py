import asyncio
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError

from linksaver.core.exceptions import FetchError
from linksaver.loaders import BrowserPageLoader
from linksaver.net.browser import VIEWPORT, BrowserSession


class FakePage:
    """Stands in for a Playwright page on the shared browser tab."""

    def __init__(
        self,
        *,
        title: str = "Example Domain",
        description: Any = "Illustrative example",
        body: Optional[str] = "<body>hello</body>",
        status: int = 200,
        fail: str = "",
        delay: float = 0.0,
    ) -> None:
        self._title = title
        self._description = description
        self._body = body
        self._status = status
        self._fail = fail
        self._delay = delay
        self.events: List[tuple] = []
        self.viewport = None

    def _maybe_fail(self, step: str) -> None:
        if self._fail == step:
            raise PlaywrightError(f"{step} exploded")

    async def goto(self, url: str, timeout: float = 0):
        self.events.append(("goto", url))
        self._maybe_fail("goto")
        await asyncio.sleep(self._delay)
        if self._status == 0:
            return None
        return SimpleNamespace(status=self._status, status_text="Status")

    async def title(self) -> str:
        self._maybe_fail("title")
        return self._title

    async def evaluate(self, expression: str) -> Any:
        self._maybe_fail("evaluate")
        return self._description

    async def eval_on_selector(self, selector: str, expression: str) -> Optional[str]:
        self._maybe_fail("body")
        return self._body

    async def set_viewport_size(self, size) -> None:
        self.viewport = size

    async def screenshot(self, **kwargs) -> bytes:
        self._maybe_fail("screenshot")
        await asyncio.sleep(self._delay)
        self.events.append(("screenshot", kwargs))
        return b"\x89PNG-fake"


def _session(page: FakePage) -> BrowserSession:
    session = BrowserSession("ws://browser:9222", timeout=1)
    session._page = page  # bypass start(); no browser is running in tests
    return session


def test_capture_returns_page_and_screenshot() -> None:
    page = FakePage(description="  Illustrative example  ")
    result = asyncio.run(_session(page).capture("https://example.com/"))

    assert result.title == "Example Domain"
    assert result.description == "Illustrative example"
    assert result.body == "<body>hello</body>"
    assert result.screenshot == b"\x89PNG-fake"
    assert page.viewport == VIEWPORT
    assert page.events[-1] == ("screenshot", {"type": "png", "full_page": True, "timeout": 1000})


def test_capture_requires_started_session() -> None:
    with pytest.raises(RuntimeError):
        asyncio.run(BrowserSession("ws://browser:9222").capture("https://example.com/"))


@pytest.mark.parametrize(
    "page, message",
    [
        (FakePage(fail="goto"), "failed to fetch URL"),
        (FakePage(status=0), "no response"),
        (FakePage(status=404), "404"),
        (FakePage(fail="title"), "failed to extract title"),
        (FakePage(title="   "), "no title found in HTML"),
        (FakePage(fail="screenshot"), "failed to take screenshot"),
    ],
)
def test_capture_failures(page: FakePage, message: str) -> None:
    with pytest.raises(FetchError) as excinfo:
        asyncio.run(_session(page).capture("https://example.com/"))
    assert message in str(excinfo.value)


@pytest.mark.parametrize("page", [FakePage(fail="evaluate"), FakePage(description=None)])
def test_missing_description_degrades_to_empty(page: FakePage) -> None:
    result = asyncio.run(_session(page).capture("https://example.com/"))
    assert result.description == ""
    assert result.screenshot is not None


@pytest.mark.parametrize("page", [FakePage(fail="body"), FakePage(body=None)])
def test_missing_body_degrades_to_empty(page: FakePage) -> None:
    result = asyncio.run(_session(page).capture("https://example.com/"))
    assert result.body == ""
    assert result.title == "Example Domain"


def test_concurrent_captures_do_not_interleave() -> None:
    page = FakePage(delay=0.01)
    session = _session(page)

    async def scenario() -> None:
        await asyncio.gather(
            session.capture("https://a.example/"),
            session.capture("https://b.example/"),
            session.capture("https://c.example/"),
        )

    asyncio.run(scenario())
    kinds = [event[0] for event in page.events]
    assert kinds == ["goto", "screenshot"] * 3


def test_browser_loader_normalizes_and_keeps_screenshot() -> None:
    page = FakePage(title="T" * 300)
    loader = BrowserPageLoader(_session(page))
    result = asyncio.run(loader.load("https://example.com/"))
    assert result.title == "T" * 250 + "..."
    assert result.screenshot == b"\x89PNG-fake"


class HangingPage(FakePage):
    """Page whose script thread never answers."""

    async def evaluate(self, expression: str) -> Any:
        await asyncio.sleep(3600)


def test_hung_page_times_out_and_releases_the_lock() -> None:
    session = BrowserSession("ws://browser:9222", timeout=0.05)
    session._page = HangingPage()

    async def scenario() -> None:
        with pytest.raises(FetchError) as excinfo:
            await asyncio.wait_for(session.capture("https://slow.example/"), 5)
        assert "timed out" in str(excinfo.value)
        assert not session._lock.locked()

        session._page = FakePage()
        result = await asyncio.wait_for(session.capture("https://example.com/"), 5)
        assert result.title == "Example Domain"

    asyncio.run(scenario())
