"""Tests for outbound delivery across transports."""

import asyncio
import logging

from passkey_relay.domain.actions import CallbackAction, CallbackKind
from passkey_relay.domain.messages import Button, Outcome
from passkey_relay.services.messenger import Messenger, TelegramTransport


def _decision_buttons(user_id: str) -> tuple[Button, ...]:
    return (
        Button(
            f"✅ Authorize {user_id}",
            CallbackAction(CallbackKind.AUTHORIZE_REQUEST, user_id),
        ),
        Button(f"❌ Ignore {user_id}", CallbackAction(CallbackKind.IGNORE_REQUEST, user_id)),
    )


def test_telegram_buttons_render_as_inline_keyboard_row(
    messenger: Messenger, telegram_client
) -> None:
    outcome = Outcome()
    outcome.send("1", "User 42 wants to access the bot.", buttons=_decision_buttons("42"))
    outcome.send("42", "🔑 Your passkey: *123456*", markdown=True)

    asyncio.run(messenger.deliver(outcome))

    assert telegram_client.markups[0] == {
        "inline_keyboard": [
            [
                {"text": "✅ Authorize 42", "callback_data": "authorize_request_42"},
                {"text": "❌ Ignore 42", "callback_data": "ignore_request_42"},
            ]
        ]
    }
    assert telegram_client.parse_modes == [None, "Markdown"]


def test_whatsapp_recipients_use_whatsapp_transport(
    messenger: Messenger, telegram_client, whatsapp_client
) -> None:
    user_id = "wa:15551234567890"
    outcome = Outcome()
    outcome.send(user_id, "hello")
    outcome.send(user_id, "choose", buttons=_decision_buttons(user_id))

    asyncio.run(messenger.deliver(outcome))

    assert telegram_client.messages == []
    assert whatsapp_client.texts == [("15551234567890", "hello")]
    to, _, buttons = whatsapp_client.button_messages[0]
    assert to == "15551234567890"
    assert buttons[0][0] == f"authorize_request_{user_id}"
    assert all(len(title) <= 20 for _, title in buttons)


def test_delivery_continues_after_failure(
    messenger: Messenger, telegram_client
) -> None:
    telegram_client.fail_for.add("42")
    outcome = Outcome()
    outcome.send("42", "first")
    outcome.send("1", "second")

    asyncio.run(messenger.deliver(outcome))

    assert telegram_client.messages == [("1", "second")]


class _RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def test_delivery_failure_log_names_recipient(
    messenger: Messenger, telegram_client
) -> None:
    telegram_client.fail_for.add("42")
    outcome = Outcome()
    outcome.send("42", "hello")
    handler = _RecordingHandler()
    logger = logging.getLogger("passkey_relay.services.messenger")
    logger.addHandler(handler)
    try:
        asyncio.run(messenger.deliver(outcome))
    finally:
        logger.removeHandler(handler)

    assert [record.getMessage() for record in handler.records] == [
        "Failed to deliver message to 42"
    ]


def test_whatsapp_messages_dropped_without_transport(telegram_client) -> None:
    messenger = Messenger(telegram=TelegramTransport(telegram_client))
    outcome = Outcome()
    outcome.send("wa:1555", "hello")

    asyncio.run(messenger.deliver(outcome))

    assert telegram_client.messages == []
