"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/pipelines.db")
    LLM_CONFIG_PATH: str = Field(default="app_config.json")

    JD_MAX_CHARS: int = Field(default=8000, ge=1)
    MAX_NOTES_PER_PIPELINE: int = Field(default=500, ge=1)
    INITIAL_PHASE: str = "analysis"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
