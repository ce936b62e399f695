from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from linksaver.core.exceptions import (
    DomainError,
    DuplicateError,
    FetchError,
    NotFoundError,
    ValidationError,
)
from linksaver.core.models import Link
from linksaver.core.settings import get_settings
from linksaver.db import LinkStore, create_engine
from linksaver.loaders import PageLoader, build_page_loader
from linksaver.logging import setup_logging
from linksaver.net.guard import UrlGuard, build_guard
from linksaver.storage import ScreenshotStorage
from linksaver.usecases import (
    DeleteLink,
    EditLink,
    Ingest,
    ListLinks,
    PseudoUrlFactory,
    Submission,
)

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; form-action 'self'; base-uri 'self'; frame-ancestors 'none'"
    ),
    "Referrer-Policy": "same-origin",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "deny",
}
_SCREENSHOT_NAME = re.compile(r"^[0-9a-f]{64}\.png$")

# Shared by every request so note keys stay unique across concurrent submissions
_pseudo_url = PseudoUrlFactory()


# ---------------------------------------------------------------------------
# Application lifecycle


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    settings = get_settings()

    engine = create_engine(settings.database_url, settings.db_busy_timeout)
    store = LinkStore(engine)
    await store.init()
    guard = build_guard(settings)
    loader = await build_page_loader(settings, guard)

    app.state.store = store
    app.state.guard = guard
    app.state.loader = loader
    app.state.screenshots = ScreenshotStorage(settings.screenshots_dir)
    app.state.show_screenshots = bool(settings.browser_cdp_url)
    logger.info(
        "LinkSaver started",
        extra={"browser": app.state.show_screenshots, "database": settings.database_url},
    )
    try:
        yield
    finally:
        await loader.aclose()
        await engine.dispose()


# ---------------------------------------------------------------------------
# Dependency factories


def get_store(request: Request) -> LinkStore:
    return request.app.state.store


def get_guard(request: Request) -> UrlGuard:
    return request.app.state.guard


def get_page_loader(request: Request) -> PageLoader:
    return request.app.state.loader


def get_screenshots(request: Request) -> ScreenshotStorage:
    return request.app.state.screenshots


def ingest_uc(
    guard: UrlGuard = Depends(get_guard),
    loader: PageLoader = Depends(get_page_loader),
    store: LinkStore = Depends(get_store),
    screenshots: ScreenshotStorage = Depends(get_screenshots),
) -> Ingest:
    return Ingest(guard, loader, store, screenshots, _pseudo_url)


def list_uc(store: LinkStore = Depends(get_store)) -> ListLinks:
    return ListLinks(store)


def edit_uc(store: LinkStore = Depends(get_store)) -> EditLink:
    return EditLink(store)


def delete_uc(
    store: LinkStore = Depends(get_store),
    screenshots: ScreenshotStorage = Depends(get_screenshots),
) -> DeleteLink:
    return DeleteLink(store, screenshots)


# ---------------------------------------------------------------------------
# Pydantic schemas


class EditLinkRequest(BaseModel):
    title: str
    description: str = ""


class LinkOut(BaseModel):
    id: int
    url: str
    title: str
    description: str
    added_at: datetime
    is_note: bool
    screenshot: Optional[str] = None


def _link_out(link: Link, request: Request) -> Dict[str, Any]:
    screenshot = None
    if request.app.state.show_screenshots and not link.is_note:
        screenshot = f"/screenshots/{link.screenshot}"
    out = LinkOut(
        id=link.id,
        url=link.url,
        title=link.title,
        description=link.display_description,
        added_at=link.added_at,
        is_note=link.is_note,
        screenshot=screenshot,
    )
    return out.model_dump(mode="json")


def _http_error(exc: DomainError) -> HTTPException:
    """Map a domain error to its HTTP outcome; internal detail never leaks."""
    if isinstance(exc, (ValidationError, FetchError)):
        return HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail="Not Found")
    if isinstance(exc, DuplicateError):
        return HTTPException(status.HTTP_409_CONFLICT, detail="URL already exists")
    return HTTPException(
        status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error"
    )


# ---------------------------------------------------------------------------
# FastAPI application

app = FastAPI(title="LinkSaver API", lifespan=lifespan)


@app.middleware("http")
async def common_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    return response


# Routes ---------------------------------------------------------------------


@app.get("/")
async def list_links(
    request: Request,
    s: str = Query(""),
    uc: ListLinks = Depends(list_uc),
) -> List[Dict[str, Any]]:
    try:
        links = await uc(s)
    except DomainError as exc:
        raise _http_error(exc) from exc
    return [_link_out(link, request) for link in links]


@app.post("/", status_code=status.HTTP_201_CREATED)
async def add_item(
    request: Request,
    form: Submission,
    uc: Ingest = Depends(ingest_uc),
    store: LinkStore = Depends(get_store),
) -> JSONResponse:
    try:
        result = await uc.submit(form)
        link = await store.get(result.link_id)
    except DomainError as exc:
        raise _http_error(exc) from exc
    content = _link_out(link, request)
    content["screenshot_saved"] = result.screenshot_saved
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=content,
        headers={"Location": f"/{result.link_id}"},
    )


@app.get("/healthz")
async def healthz(store: LinkStore = Depends(get_store)) -> Dict[str, str]:
    try:
        await store.ping()
    except DomainError as exc:
        raise _http_error(exc) from exc
    return {"status": "ok"}


@app.get("/screenshots/{name}")
def get_screenshot(
    name: str,
    request: Request,
    screenshots: ScreenshotStorage = Depends(get_screenshots),
) -> FileResponse:
    if not request.app.state.show_screenshots or not _SCREENSHOT_NAME.match(name):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Not Found")
    path = screenshots.screenshots_dir / name
    if not path.is_file():
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Not Found")
    return FileResponse(path, media_type="image/png")


@app.get("/{link_id}")
async def get_link(
    link_id: int,
    request: Request,
    store: LinkStore = Depends(get_store),
) -> Dict[str, Any]:
    try:
        link = await store.get(link_id)
    except DomainError as exc:
        raise _http_error(exc) from exc
    return _link_out(link, request)


@app.patch("/{link_id}")
async def edit_link(
    link_id: int,
    req: EditLinkRequest,
    request: Request,
    uc: EditLink = Depends(edit_uc),
) -> Dict[str, Any]:
    try:
        link = await uc(link_id, req.title, req.description)
    except DomainError as exc:
        raise _http_error(exc) from exc
    return _link_out(link, request)


@app.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(link_id: int, uc: DeleteLink = Depends(delete_uc)) -> Response:
    try:
        await uc(link_id)
    except DomainError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    run()


__all__ = ["app", "run"]
