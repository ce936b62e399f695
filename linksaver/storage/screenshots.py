from __future__ import annotations

import logging
from pathlib import Path

from linksaver.core.models import screenshot_filename

logger = logging.getLogger(__name__)


class ScreenshotStorage:
    """File system storage for page screenshots, addressed by URL digest."""

    def __init__(self, screenshots_dir: Path) -> None:
        self.screenshots_dir = Path(screenshots_dir)

    # ------------------------------------------------------------------
    # public API
    def path_for(self, url: str) -> Path:
        return self.screenshots_dir / screenshot_filename(url)

    def save(self, url: str, screenshot: bytes) -> Path:
        """Write ``screenshot`` for ``url``, replacing any previous capture."""

        self.screenshots_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(url)
        path.write_bytes(screenshot)
        return path

    def delete(self, url: str) -> bool:
        """Remove the screenshot for ``url``; return whether one was removed.

        Failures are logged and reported as ``False``: a stale image never
        affects the stored links.
        """

        path = self.path_for(url)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.warning("Failed to delete screenshot", exc_info=True, extra={"path": str(path)})
            return False
        return True

    def exists(self, url: str) -> bool:
        return self.path_for(url).is_file()


__all__ = ["ScreenshotStorage"]
