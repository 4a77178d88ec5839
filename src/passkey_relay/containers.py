"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from passkey_relay.adapters.json_state_repository import JsonFileStateRepository
from passkey_relay.adapters.supabase_state_repository import SupabaseStateRepository
from passkey_relay.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from passkey_relay.adapters.whatsapp_client import HttpxWhatsAppClient
from passkey_relay.config import ConfigurationError, Settings, resolve_bot_token
from passkey_relay.services.access import AccessController
from passkey_relay.services.dispatcher import Dispatcher
from passkey_relay.services.messenger import (
    Messenger,
    TelegramTransport,
    WhatsAppTransport,
)
from passkey_relay.services.passkeys import PasskeyManager
from passkey_relay.services.relay import RelayRouter
from passkey_relay.services.state_store import StateRepository, StateStore

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: StateStore
    telegram_client: TelegramClient
    messenger: Messenger
    access_controller: AccessController
    relay_router: RelayRouter
    dispatcher: Dispatcher
    close_resources: Callable[[], Awaitable[None]]


def build_state_repository(settings: Settings) -> StateRepository:
    """Create the configured state repository."""
    backend = settings.state_backend.lower()
    if backend == "json":
        return JsonFileStateRepository(Path(settings.state_path))
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ConfigurationError(
                "Supabase state backend needs SUPABASE_URL and SUPABASE_SERVICE_KEY"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseStateRepository(client, table=settings.supabase_state_table)
    raise ConfigurationError(f"Unknown state backend: {settings.state_backend}")


def build_container(
    settings: Settings | None = None,
    prompt: Callable[[str], str] | None = None,
    repository: StateRepository | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = StateStore.open(
        repository or build_state_repository(resolved_settings),
        admin_id=resolved_settings.admin_id,
        passkey_length=resolved_settings.passkey_length,
        passkey_timeout_minutes=resolved_settings.passkey_timeout_minutes,
    )
    bot_token, prompted = resolve_bot_token(
        resolved_settings, store.state.bot_token, prompt
    )
    if prompted:
        store.state.bot_token = bot_token
        store.save_now()

    telegram_client = HttpxTelegramClient.create(bot_token)
    whatsapp_client = None
    if resolved_settings.whatsapp_enabled:
        whatsapp_client = HttpxWhatsAppClient.create(
            access_token=resolved_settings.whatsapp_access_token or "",
            phone_number_id=resolved_settings.whatsapp_phone_number_id or "",
        )
    else:
        logger.info("WhatsApp transport not configured")
    messenger = Messenger(
        telegram=TelegramTransport(telegram_client),
        whatsapp=WhatsAppTransport(whatsapp_client) if whatsapp_client else None,
    )
    access_controller = AccessController(store=store, passkeys=PasskeyManager())
    relay_router = RelayRouter(store=store)

    async def close_resources() -> None:
        await telegram_client.close()
        if whatsapp_client is not None:
            await whatsapp_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        telegram_client=telegram_client,
        messenger=messenger,
        access_controller=access_controller,
        relay_router=relay_router,
        dispatcher=Dispatcher(access=access_controller, relay=relay_router),
        close_resources=close_resources,
    )
