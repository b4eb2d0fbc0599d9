"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - production requires DATABASE_URL; without it the in-memory store is used
    - sweep_interval_seconds stays below the reminder window, so no reminder is skipped

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box locally
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slot_scheduler.core.date_arith import REMINDER_WINDOW


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    environment: Literal["development", "test", "production"] = "development"

    # Database (None -> in-memory store)
    database_url: str | None = None

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str | None) -> str | None:
        """Hosts provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v or None

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Periodic sweep
    sweep_enabled: bool = True
    sweep_interval_seconds: int = 900

    @field_validator("sweep_interval_seconds")
    @classmethod
    def interval_within_reminder_window(cls, v: int) -> int:
        if v <= 0 or v >= REMINDER_WINDOW.total_seconds():
            raise ValueError(
                f"sweep_interval_seconds must be in (0, {int(REMINDER_WINDOW.total_seconds())})",
            )
        return v

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @model_validator(mode="after")
    def require_database_in_production(self) -> "Settings":
        if self.environment == "production" and not self.database_url:
            raise ValueError("DATABASE_URL is required in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
