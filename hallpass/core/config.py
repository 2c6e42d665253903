"""Application configuration settings."""

from datetime import date
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GradingPeriodRange(BaseModel):
    """Explicit grading period date range (inclusive on both ends)."""

    label: str
    start: date
    end: date


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Hall Pass"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite:///./hallpass.db"

    # Pass quota
    MONITORED_DESTINATION: str = "Bathroom"
    QUOTA_THRESHOLD: int = 2
    TEACHER_OVERRIDE_PIN: str = "2468"
    DESTINATIONS: list[str] = [
        "Bathroom",
        "Nurse",
        "Office",
        "Counselor",
        "Library",
        "Locker",
        "Other",
    ]

    # Optional hard-coded quarters; ignored unless exactly four are given
    GRADING_PERIODS: list[GradingPeriodRange] = []

    # Admin
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_MODE: bool = False

    # Scanner
    SCANNER_MODE: Literal["select", "toggle"] = "select"
    SCANNER_DEFAULT_DESTINATION: str = "Bathroom"

    # Lists
    RECENT_LEDGER_LIMIT: int = 10

    # Upload Settings
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_EXTENSIONS: list[str] = [".csv", ".xlsx"]

    @field_validator("QUOTA_THRESHOLD")
    @classmethod
    def validate_quota_threshold(cls, v: int) -> int:
        if v < 1:
            raise ValueError("QUOTA_THRESHOLD must be at least 1")
        return v

    @field_validator("SCANNER_MODE", mode="before")
    @classmethod
    def normalize_scanner_mode(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
