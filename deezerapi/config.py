from __future__ import annotations

from functools import lru_cache
from typing import Any

from loguru import logger
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

console = Console()
log = logger.bind(module="config")


class Settings(BaseSettings):
    """Centralised client configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_id: str | None = Field(default=None, alias="DEEZER_APP_ID")
    app_secret: str | None = Field(default=None, alias="DEEZER_APP_SECRET")
    redirect_uri: str | None = Field(default=None, alias="DEEZER_REDIRECT_URI")

    connect_url: str = Field(default="https://connect.deezer.com", alias="DEEZER_CONNECT_URL")
    api_url: str = Field(default="https://api.deezer.com", alias="DEEZER_API_URL")
    timeout_seconds: float = Field(default=10.0, alias="DEEZER_TIMEOUT_SECONDS")
    user_agent: str = Field(default="deezerapi", alias="DEEZER_USER_AGENT")

    auto_retry: bool = Field(default=False, alias="DEEZER_AUTO_RETRY")
    return_assoc: bool = Field(default=False, alias="DEEZER_RETURN_ASSOC")
    # 0 disables the attempt cap.
    rate_limit_max_attempts: int = Field(default=10, alias="DEEZER_RATE_LIMIT_MAX_ATTEMPTS")
    rate_limit_backoff_seconds: float = Field(default=0.0, alias="DEEZER_RATE_LIMIT_BACKOFF_SECONDS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @computed_field(return_type=int | None)
    @property
    def retry_max_attempts(self) -> int | None:
        """Return the retry attempt cap, or None when retries are unbounded."""
        if self.rate_limit_max_attempts <= 0:
            return None
        return self.rate_limit_max_attempts

    def export_safe(self) -> dict[str, Any]:
        """Return non-sensitive settings for debugging/logging."""
        return {
            "app_id": self.app_id,
            "redirect_uri": self.redirect_uri,
            "connect_url": self.connect_url,
            "api_url": self.api_url,
            "timeout_seconds": self.timeout_seconds,
            "auto_retry": self.auto_retry,
            "return_assoc": self.return_assoc,
            "rate_limit_max_attempts": self.rate_limit_max_attempts,
            "rate_limit_backoff_seconds": self.rate_limit_backoff_seconds,
        }


@lru_cache
def get_settings() -> Settings:
    """Load and cache client settings."""
    settings = Settings()
    console.log(
        f"[bold green]Loaded settings[/] api_url={settings.api_url!r} "
        f"app_id={settings.app_id!r}",
    )
    log.info("Settings initialised: {}", settings.export_safe())
    return settings
