"""Application configuration."""

import os
from collections.abc import Callable

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class ConfigurationError(RuntimeError):
    """Raised when startup configuration is incomplete."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    bot_token: str | None = None
    admin_id: str | None = None
    admin_token: str | None = None
    state_backend: str = "json"
    state_path: str = "config.json"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_state_table: str = "bot_state"
    passkey_length: int | None = Field(default=None, ge=1, le=32)
    passkey_timeout_minutes: int | None = Field(default=None, ge=1)
    whatsapp_access_token: str | None = None
    whatsapp_phone_number_id: str | None = None
    whatsapp_verify_token: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def whatsapp_enabled(self) -> bool:
        """Return true when the WhatsApp transport is fully configured."""
        return bool(self.whatsapp_access_token and self.whatsapp_phone_number_id)


def resolve_bot_token(
    settings: Settings,
    persisted: str | None,
    prompt: Callable[[str], str] | None = None,
) -> tuple[str, bool]:
    """Resolve the Telegram bot token.

    Order: environment (``BOT_TOKEN``), then the persisted value, then the
    interactive prompt. Returns the token and whether it was newly prompted
    (and so should be persisted by the caller).
    """
    if settings.bot_token and settings.bot_token.strip():
        return settings.bot_token.strip(), False
    if persisted and persisted.strip():
        return persisted.strip(), False
    if prompt is not None:
        answer = prompt("Enter your Telegram bot token: ").strip()
        if answer:
            return answer, True
    raise ConfigurationError("No Telegram bot token configured")
