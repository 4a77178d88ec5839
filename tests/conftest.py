"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from passkey_relay.adapters.telegram_client import TelegramClient
from passkey_relay.adapters.whatsapp_client import WhatsAppClient
from passkey_relay.config import Settings
from passkey_relay.containers import AppContainer
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

ADMIN_ID = "1"


@dataclass
class FakeClock:
    """Controllable UTC clock."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += timedelta(minutes=minutes)


@dataclass
class InMemoryStateRepository(StateRepository):
    """In-memory state repository for tests."""

    document: dict[str, object] | None = None
    saves: int = 0
    fail_saves: bool = False

    def load(self) -> dict[str, object] | None:
        return self.document

    def save(self, document: dict[str, object]) -> None:
        if self.fail_saves:
            raise OSError("disk full")
        self.document = document
        self.saves += 1


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[str, str]] = field(default_factory=list)
    markups: list[dict | None] = field(default_factory=list)
    parse_modes: list[str | None] = field(default_factory=list)
    callbacks: list[tuple[str, str | None]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None
    updates: list[list[dict[str, object]]] = field(default_factory=list)
    offsets: list[int | None] = field(default_factory=list)
    fail_for: set[str] = field(default_factory=set)

    async def send_message(
        self,
        chat_id: int | str,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> None:
        if str(chat_id) in self.fail_for:
            raise RuntimeError("chat not found")
        self.messages.append((str(chat_id), text))
        self.markups.append(reply_markup)
        self.parse_modes.append(parse_mode)

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        self.callbacks.append((callback_query_id, text))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button

    async def get_updates(
        self, offset: int | None = None, timeout: int = 30
    ) -> list[dict[str, object]]:
        self.offsets.append(offset)
        return self.updates.pop(0) if self.updates else []

    def texts_for(self, chat_id: str) -> list[str]:
        return [text for recipient, text in self.messages if recipient == chat_id]


@dataclass
class FakeWhatsAppClient(WhatsAppClient):
    """Fake WhatsApp client that records messages."""

    texts: list[tuple[str, str]] = field(default_factory=list)
    button_messages: list[tuple[str, str, list[tuple[str, str]]]] = field(
        default_factory=list
    )

    async def send_text(self, to: str, text: str) -> None:
        self.texts.append((to, text))

    async def send_buttons(
        self, to: str, text: str, buttons: list[tuple[str, str]]
    ) -> None:
        self.button_messages.append((to, text, buttons))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        bot_token="test-token",
        admin_id=ADMIN_ID,
        admin_token="admin-token",
        whatsapp_verify_token="verify-me",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state_repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def store(state_repository: InMemoryStateRepository) -> StateStore:
    return StateStore.open(state_repository, admin_id=ADMIN_ID)


@pytest.fixture
def passkeys(clock: FakeClock) -> PasskeyManager:
    return PasskeyManager(clock=clock)


@pytest.fixture
def access(store: StateStore, passkeys: PasskeyManager) -> AccessController:
    return AccessController(store=store, passkeys=passkeys)


@pytest.fixture
def relay(store: StateStore) -> RelayRouter:
    return RelayRouter(store=store)


@pytest.fixture
def dispatcher(access: AccessController, relay: RelayRouter) -> Dispatcher:
    return Dispatcher(access=access, relay=relay)


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def whatsapp_client() -> FakeWhatsAppClient:
    return FakeWhatsAppClient()


@pytest.fixture
def messenger(
    telegram_client: FakeTelegramClient, whatsapp_client: FakeWhatsAppClient
) -> Messenger:
    return Messenger(
        telegram=TelegramTransport(telegram_client),
        whatsapp=WhatsAppTransport(whatsapp_client),
    )


@pytest.fixture
def container(
    settings: Settings,
    store: StateStore,
    telegram_client: FakeTelegramClient,
    messenger: Messenger,
    access: AccessController,
    relay: RelayRouter,
    dispatcher: Dispatcher,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        telegram_client=telegram_client,
        messenger=messenger,
        access_controller=access,
        relay_router=relay,
        dispatcher=dispatcher,
        close_resources=close_resources,
    )
