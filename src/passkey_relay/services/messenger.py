"""Outbound delivery across chat transports."""

import logging
from dataclasses import dataclass
from typing import Protocol

from passkey_relay.adapters.telegram_client import TelegramClient
from passkey_relay.adapters.whatsapp_client import WhatsAppClient
from passkey_relay.domain.messages import OutboundMessage, Outcome

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "wa:"
_WHATSAPP_TITLE_LIMIT = 20


def whatsapp_identity(phone_number: str) -> str:
    """Return the relay identity of a WhatsApp sender."""
    return f"{WHATSAPP_PREFIX}{phone_number}"


class Transport(Protocol):
    """Delivers outbound messages on one chat platform."""

    async def send(self, message: OutboundMessage) -> None:
        """Send one message."""


@dataclass
class TelegramTransport:
    """Renders outbound messages for Telegram."""

    client: TelegramClient

    async def send(self, message: OutboundMessage) -> None:
        """Send a message, rendering buttons as an inline keyboard row."""
        reply_markup = None
        if message.buttons:
            reply_markup = {
                "inline_keyboard": [
                    [
                        {"text": button.text, "callback_data": button.action.encode()}
                        for button in message.buttons
                    ]
                ]
            }
        await self.client.send_message(
            chat_id=message.recipient,
            text=message.text,
            reply_markup=reply_markup,
            parse_mode="Markdown" if message.markdown else None,
        )


@dataclass
class WhatsAppTransport:
    """Renders outbound messages for WhatsApp."""

    client: WhatsAppClient

    async def send(self, message: OutboundMessage) -> None:
        """Send a message, rendering buttons as interactive reply buttons."""
        to = message.recipient.removeprefix(WHATSAPP_PREFIX)
        if not message.buttons:
            await self.client.send_text(to, message.text)
            return
        await self.client.send_buttons(
            to,
            message.text,
            [
                (button.action.encode(), button.text[:_WHATSAPP_TITLE_LIMIT])
                for button in message.buttons
            ],
        )


@dataclass
class Messenger:
    """Chooses the transport for each recipient and delivers outcomes.

    Delivery failures are logged and never fed back into state.
    """

    telegram: Transport
    whatsapp: Transport | None = None

    def transport_for(self, recipient: str) -> Transport | None:
        """Return the transport that reaches the recipient, if configured."""
        if recipient.startswith(WHATSAPP_PREFIX):
            return self.whatsapp
        return self.telegram

    async def deliver(self, outcome: Outcome) -> None:
        """Send every message of an outcome, continuing past failures."""
        for message in outcome.messages:
            transport = self.transport_for(message.recipient)
            if transport is None:
                logger.warning(
                    "No transport configured for %s; message dropped",
                    message.recipient,
                )
                continue
            try:
                await transport.send(message)
            except Exception:
                logger.exception(
                    "Failed to deliver message to %s",
                    message.recipient,
                    extra={"recipient": message.recipient},
                )
