"""Application configuration."""

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-4o"
    openai_max_output_tokens: int = 1000
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    stripe_secret_key: str
    stripe_webhook_secret: str
    stripe_price_id: str
    session_secret: str
    session_max_age_seconds: int = 24 * 60 * 60
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator(
        "stripe_secret_key", "stripe_webhook_secret", "stripe_price_id", "session_secret"
    )
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @property
    def secure_cookies(self) -> bool:
        """Return True when session cookies must only travel over HTTPS."""
        return self.environment not in {"local", "test"}
