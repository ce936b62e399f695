"""File system storage for screenshot artifacts."""

from .screenshots import ScreenshotStorage

__all__ = ["ScreenshotStorage"]
