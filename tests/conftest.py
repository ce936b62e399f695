import sys
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

# Ensure project root on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apps.api.main import app, get_guard, get_page_loader
from linksaver.core.models import LoadedPage
from linksaver.core.settings import get_settings
from linksaver.db import LinkStore, create_engine
from linksaver.loaders import PageLoader
from linksaver.net.guard import UrlGuard


class StaticLoader(PageLoader[LoadedPage]):
    """Page loader returning a canned page (or error) and recording each URL."""

    def __init__(self, page: Optional[LoadedPage] = None, error: Exception | None = None) -> None:
        self.page = page or LoadedPage(title="Example Domain", description="Illustrative example")
        self.error = error
        self.calls: List[str] = []

    async def fetch(self, url: str) -> LoadedPage:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.page

    def extract(self, url: str, fetched: LoadedPage) -> LoadedPage:
        return fetched


async def open_store(path: Path) -> LinkStore:
    """Create a store on a fresh SQLite file; callers dispose ``store.engine``."""
    store = LinkStore(create_engine(f"sqlite+aiosqlite:///{path}"))
    await store.init()
    return store


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "links.sqlite"


@pytest.fixture()
def offline_guard() -> UrlGuard:
    """Guard that still rejects literal and local hosts but never resolves DNS."""
    return UrlGuard(resolve_hostnames=False)


@pytest.fixture()
def fake_loader() -> StaticLoader:
    return StaticLoader()


@pytest.fixture()
def client(tmp_path, monkeypatch, fake_loader, offline_guard):
    """FastAPI test client on a temporary database with the network stubbed out."""

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.sqlite'}")
    monkeypatch.setenv("SCREENSHOTS_DIR", str(tmp_path / "screenshots"))
    monkeypatch.delenv("BROWSER_CDP_URL", raising=False)
    monkeypatch.delenv("CHROMEDP", raising=False)
    get_settings.cache_clear()

    app.dependency_overrides[get_guard] = lambda: offline_guard
    app.dependency_overrides[get_page_loader] = lambda: fake_loader

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_settings.cache_clear()
