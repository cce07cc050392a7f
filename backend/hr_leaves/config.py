# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "HR Leaves"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://hr_leaves:hr_leaves@db:5432/hr_leaves"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Accrual worker
    monthly_accrual_days: float = 1.5
    accrual_leave_type_id: uuid.UUID | None = None
    accrual_interval_seconds: int = 86400


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
