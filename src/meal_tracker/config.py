"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

_PLACEHOLDER_KEYS = {"your_gemini_api_key_here", "your_openai_api_key_here"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    ai_provider: str = "gemini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash-latest"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    timezone: str = "UTC"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def ai_api_key(self) -> str | None:
        """Return the credential for the configured AI provider, if usable."""
        if self.ai_provider == "openai":
            return parse_api_key(self.openai_api_key)
        return parse_api_key(self.gemini_api_key)


def parse_api_key(raw: str | None) -> str | None:
    """Return a usable API key or None when unset or left as a placeholder."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned or cleaned in _PLACEHOLDER_KEYS:
        return None
    return cleaned
