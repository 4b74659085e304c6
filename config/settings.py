"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    APP_BASE_URL: str | None = None
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    FALLBACK_FOLLOW_UP: str = "Can you elaborate on that with specifics?"

    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_SENDER: str = "interviews@localhost"
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
