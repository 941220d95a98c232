"""Application configuration settings."""
from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "staging" | "prod"
ENV = os.getenv("OPS_ENV", "dev").lower()


class Settings(BaseSettings):
    """Environment configuration for the operations console backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///ops_console.db"
    SECRET_KEY: str = "change-me"
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Identity transports ---------------------------------------------
    SESSION_COOKIE_NAME: str = "admin_session"

    # --- Alert engine defaults (overridable through admin_settings) ------
    SITE_TIMEZONE: str = "UTC"
    CAMPAIGN_ALERT_WARNING_PCT: int = 75
    CAMPAIGN_ALERT_CRITICAL_PCT: int = 90
    HEALTH_WARNING_FLOOR: Decimal = Decimal("100")
    PRIZE_ALERT_DAYS_AHEAD: int = 7
    DEFAULT_TOKEN_VALUE: Decimal = Decimal("0.05")
    PROCESSING_FEE_PERCENT: Decimal = Decimal("0.029")
    PROCESSING_FEE_FIXED: Decimal = Decimal("0.30")

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("SENTRY_DSN")
    @classmethod
    def _strip_empty_dsn(cls, value: str | None) -> str | None:
        """Normalise empty DSNs to ``None`` so Sentry stays disabled."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class AppInfo(BaseModel):
    name: str = "ops-console-backend"
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
