"""Application configuration with validation."""
from typing import Literal
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings, overridable through the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Audit Scoring Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "console"

    # Scoring
    PROGRESS_BAR_WIDTH: int = Field(
        default=600,
        description="Scale of a category progress value (answered share x width)",
    )
    SCORE_DECIMAL_PLACES: int = Field(default=2, le=6)

    # Audit status that locks the questionnaire
    READ_ONLY_STATUS_CODE: int = 181910001

    # Snapshot persistence
    SNAPSHOT_BACKEND: Literal["file", "redis"] = "file"
    SNAPSHOT_DIR: str = ".audit_snapshots"
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL_SNAPSHOT: int = Field(default=604800, ge=60)  # 7 days

    @field_validator("PROGRESS_BAR_WIDTH")
    @classmethod
    def validate_progress_width(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("PROGRESS_BAR_WIDTH must be positive")
        return v

    @field_validator("SCORE_DECIMAL_PLACES")
    @classmethod
    def validate_decimal_places(cls, v: int) -> int:
        if v < 0:
            raise ValueError("SCORE_DECIMAL_PLACES cannot be negative")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
