"""Application settings and configuration management."""
from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/practice.db")
    APP_CONFIG_PATH: str = Field(default="app_config.json")
    QUESTION_BANK_PATH: str | None = None

    DAILY_SESSION_LIMIT: int = 2
    MIN_QUESTIONS: int = 3
    MAX_QUESTIONS: int = 10
    GENTLE_QUESTION_COUNT: int = 3

    MONTHLY_COST_THRESHOLD_USD: float = 285.0

    COACHING_MAX_WORKERS: int = Field(default=4, ge=1)
    COACHING_LOCK_TTL_SECONDS: int = 600

    CRON_SECRET: str = ""
    REVIEWER_IDS: List[str] = Field(default_factory=list)

    EVENTS_ASYNC: bool = True
    EVENT_QUEUE_SIZE: int = 1000

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
