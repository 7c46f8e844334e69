"""
Configuration settings using Pydantic Settings.
"""

from pathlib import Path
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

BASE_DIR = Path(__file__).resolve().parents[1]

# Partner polling never runs faster than this, whatever the environment says.
MIN_POLL_INTERVAL_SECONDS = 5.0


class Settings(BaseSettings):
    """API settings loaded from environment variables."""

    DATABASE_PATH: str = "database/lovii.db"

    CORS_ORIGINS: list[str] = [
        "http://localhost:8081",
        "http://localhost:19006",
        "http://127.0.0.1:8081",
    ]

    PARTNER_CODE_LENGTH: int = 6
    PARTNER_CODE_MAX_ATTEMPTS: int = 5

    BCRYPT_ROUNDS: int = 12

    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def resolve_relative_paths(self):
        db_path = Path(self.DATABASE_PATH)
        if not db_path.is_absolute():
            self.DATABASE_PATH = str((BASE_DIR / db_path).resolve())
        return self


class ClientSettings(BaseSettings):
    """Device-side sync client settings (env prefix ``LOVII_CLIENT_``)."""

    API_URL: str = "http://localhost:8000"
    CACHE_PATH: str = "lovii_cache.db"
    REQUEST_TIMEOUT: float = 10.0

    POLL_INTERVAL_SECONDS: float = MIN_POLL_INTERVAL_SECONDS

    OUTBOX_FLUSH_INTERVAL_SECONDS: float = 2.0
    OUTBOX_RETRY_BASE_SECONDS: float = 1.0
    OUTBOX_RETRY_MAX_SECONDS: float = 300.0
    OUTBOX_BATCH_SIZE: int = 50

    model_config = SettingsConfigDict(
        env_prefix="LOVII_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def clamp_intervals(self):
        if self.POLL_INTERVAL_SECONDS < MIN_POLL_INTERVAL_SECONDS:
            self.POLL_INTERVAL_SECONDS = MIN_POLL_INTERVAL_SECONDS
        if self.OUTBOX_RETRY_MAX_SECONDS < self.OUTBOX_RETRY_BASE_SECONDS:
            self.OUTBOX_RETRY_MAX_SECONDS = self.OUTBOX_RETRY_BASE_SECONDS
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: Cached Settings instance
    :rtype: Settings
    """
    return Settings()


settings = get_settings()
