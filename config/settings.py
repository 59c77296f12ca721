"""Application settings and configuration management."""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    SESSION_DIR: str = Field(default="data/sessions")
    SESSION_BACKEND: Literal["file", "sqlite"] = "file"
    APP_CONFIG: str = "app_config.json"
    SCORING_CONFIG: str = "config/scoring.yaml"

    MAX_TIME_SECONDS: int = 10 * 60
    RESUME_WINDOW_MINUTES: int = 30
    CONSECUTIVE_POOR_THRESHOLD: int = 3
    INITIAL_PROGRESS: int = Field(default=50, ge=0, le=100)
    PASTE_BAN_THRESHOLD: int = Field(default=2, ge=1)

    BASE_TEMPERATURE: float = 0.75
    RETRY_TEMPERATURE: float = 0.9
    DUPLICATE_PREFIX_CHARS: int = 15

    TICK_SECONDS: float = 1.0
    WATCHDOG_ENABLED: bool = True

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True)


settings = Settings()
