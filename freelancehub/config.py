"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Environment: "dev" | "test" | "staging" | "prod"
ENV = os.getenv("FREELANCEHUB_ENV", "dev").lower()


class Settings(BaseSettings):
    """Environment configuration for the freelancehub backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///freelancehub.db"
    SECRET_KEY: str = "change-me"
    LOG_LEVEL: str = "INFO"
    # "json" in deployed environments, "text" is easier to read locally.
    LOG_FORMAT: str = "json"
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Database --------------------------------------------------------
    # SQLite waits this long on a locked file before failing a write.
    DB_BUSY_TIMEOUT_SECONDS: float = 15.0
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # --- Engagement engine -----------------------------------------------
    # Move each paid milestone from the client wallet (PAYMENT) to the
    # freelancer wallet (EARNING); off means only total_earnings grows.
    SETTLE_EARNINGS_TO_WALLET: bool = True

    # --- Listings --------------------------------------------------------
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8"
    )

    @field_validator("SENTRY_DSN")
    @classmethod
    def _strip_empty_dsn(cls, value: str | None) -> str | None:
        """Normalise an empty DSN to ``None``."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class AppInfo(BaseModel):
    name: str = "freelancehub-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
