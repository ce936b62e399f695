from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from linksaver.core.exceptions import DomainError, ValidationError
from linksaver.core.models import NOTE_URL_PREFIX
from linksaver.core.text import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH
from linksaver.db import LinkStore
from linksaver.loaders import PageLoader
from linksaver.net.guard import UrlGuard
from linksaver.storage import ScreenshotStorage

logger = logging.getLogger("ingest")


class Stage(str, enum.Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    FETCHED = "fetched"
    EXTRACTED = "extracted"
    STORED = "stored"
    SCREENSHOT = "screenshot"
    DONE = "done"


class Submission(BaseModel):
    """Form fields of one submission: a URL, or a note title and text."""

    url: str = ""
    note_title: str = ""
    note_text: str = ""


@dataclass
class IngestResult:
    link_id: int
    url: str
    stage: Stage = Stage.DONE
    screenshot_saved: bool = False


class PseudoUrlFactory:
    """``note:<unix millis>`` keys, strictly increasing within the process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def __call__(self) -> str:
        with self._lock:
            now = time.time_ns() // 1_000_000
            self._last = max(now, self._last + 1)
            return f"{NOTE_URL_PREFIX}{self._last}"


def _validate_note(title: str, text: str) -> tuple[str, str]:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Note title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Note title is too long, max {MAX_TITLE_LENGTH} characters allowed"
        )
    text = (text or "").strip()
    if not text:
        raise ValidationError("Note text is required")
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Note text is too long, max {MAX_DESCRIPTION_LENGTH} characters allowed"
        )
    return title, text


class Ingest:
    """Pipeline turning a submitted URL or note into a stored, searchable link."""

    def __init__(
        self,
        guard: UrlGuard,
        loader: PageLoader,
        store: LinkStore,
        screenshots: ScreenshotStorage,
        pseudo_url: Optional[PseudoUrlFactory] = None,
    ) -> None:
        self.guard = guard
        self.loader = loader
        self.store = store
        self.screenshots = screenshots
        self.pseudo_url = pseudo_url or PseudoUrlFactory()

    # ------------------------------------------------------------------
    async def submit(self, form: Submission) -> IngestResult:
        """Single entry point: URL submissions when ``url`` is set, else notes."""
        if form.url.strip():
            return await self.add_link(form.url)
        return await self.add_note(form.note_title, form.note_text)

    async def add_link(self, candidate: str) -> IngestResult:
        stage = Stage.RECEIVED
        try:
            url = await self.guard.validate(candidate)
            stage = Stage.VALIDATED

            fetched = await self.loader.fetch(url)
            stage = Stage.FETCHED

            page = self.loader.extract(url, fetched)
            stage = Stage.EXTRACTED

            link_id = await self.store.add(url, page.title, page.description, page.body)
            stage = Stage.STORED
        except DomainError as exc:
            logger.info(
                "ingest_failed",
                extra={"stage": stage.value, "reason": str(exc), "candidate": candidate},
            )
            raise

        result = IngestResult(link_id=link_id, url=url, stage=Stage.STORED)
        if page.screenshot is not None:
            result.stage = Stage.SCREENSHOT
            try:
                self.screenshots.save(url, page.screenshot)
                result.screenshot_saved = True
            except OSError:
                logger.exception(
                    "Failed to save screenshot", extra={"link_id": link_id, "url": url}
                )
        result.stage = Stage.DONE
        logger.info("ingest_done", extra={"link_id": link_id, "url": url})
        return result

    async def add_note(self, title: str, text: str) -> IngestResult:
        stage = Stage.RECEIVED
        url = ""
        try:
            title, text = _validate_note(title, text)
            stage = Stage.VALIDATED

            url = self.pseudo_url()
            link_id = await self.store.add(url, title, text, text)
        except DomainError as exc:
            logger.info(
                "ingest_failed",
                extra={"stage": stage.value, "reason": str(exc), "candidate": url},
            )
            raise
        logger.info("ingest_done", extra={"link_id": link_id, "url": url})
        return IngestResult(link_id=link_id, url=url)


__all__ = ["Ingest", "IngestResult", "PseudoUrlFactory", "Stage", "Submission"]
