"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    RECORDINGS_DIR: str = Field(default="data/recordings")
    APP_CONFIG_PATH: str = Field(default="app_config.json")
    EVALUATION_ROUTE: str = "evaluation_engine"

    POLL_INTERVAL_S: float = Field(default=3.0, gt=0.0)
    DISPATCH_WORKERS: int = Field(default=4, ge=1)
    EVAL_MAX_RETRIES: int = Field(default=0, ge=0)
    EVAL_BACKOFF_BASE_S: float = Field(default=1.0, ge=0.0)
    MAX_RECORDING_BYTES: int = Field(default=20 * 1024 * 1024, ge=1)
    RESUME_PROCESSING_ON_STARTUP: bool = True

    ALLOWED_ORIGINS: str = "*"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
