"""Application settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the application."""

    database_url: str = Field(default="sqlite+aiosqlite:///linksaver.sqlite")
    # Seconds SQLite waits on a locked database before failing a write
    db_busy_timeout: float = Field(default=15.0)
    screenshots_dir: Path = Field(default=Path("screenshots"))
    # Remote browser endpoint (CDP websocket). Empty disables screenshots and
    # the browser-rendered fetch path.
    browser_cdp_url: str = Field(
        default="",
        validation_alias=AliasChoices("browser_cdp_url", "chromedp"),
    )
    browser_timeout: float = Field(default=15.0)
    fetch_timeout: float = Field(default=10.0)
    fetch_connect_timeout: float = Field(default=5.0)
    dns_timeout: float = Field(default=5.0)
    max_redirects: int = Field(default=5, ge=0)
    user_agent: str = Field(default="LinkSaver/1.0")
    log_level: str = Field(default="INFO")
    service_name: str = Field(default="linksaver")
    environment: str = Field(default="development")
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # Unrelated variables in the environment are not an error.
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Return application settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
