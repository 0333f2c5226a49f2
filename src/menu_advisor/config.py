"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_SEARCH_CONTEXT = (
    "North Metro Atlanta (Kennesaw, Woodstock, Canton, Marietta, GA)"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    preferences_owner_id: str = "default"
    preferences_path: str = "menu_advisor_preferences.json"
    retry_max_attempts: int = 4
    retry_delay_seconds: float = 1.0
    default_search_context: str = DEFAULT_SEARCH_CONTEXT
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        """Return True when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_service_key)

    @property
    def show_error_details(self) -> bool:
        """Return True when user-facing errors should carry debug detail."""
        return self.environment == "local"
