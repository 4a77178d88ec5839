"""Translation of transport updates into core events."""

import asyncio
import logging

from pydantic import ValidationError

from passkey_relay.api.telegram_models import TelegramMessage, TelegramUpdate
from passkey_relay.api.whatsapp_models import WhatsAppMessage, WhatsAppWebhook
from passkey_relay.containers import AppContainer
from passkey_relay.domain.messages import ButtonPress, InboundMessage, Outcome
from passkey_relay.services.messenger import whatsapp_identity
from passkey_relay.telegram_commands import CHAT_MENU_BUTTON, telegram_commands

logger = logging.getLogger(__name__)

_POLL_RETRY_SECONDS = 5


async def sync_bot_commands(container: AppContainer) -> None:
    """Publish the command list and menu button to Telegram."""
    try:
        await container.telegram_client.set_my_commands(telegram_commands())
        await container.telegram_client.set_chat_menu_button(CHAT_MENU_BUTTON)
    except Exception:
        logger.exception("Failed to sync Telegram bot commands")


async def handle_telegram_update(container: AppContainer, update: TelegramUpdate) -> None:
    """Handle one Telegram update; errors are logged and contained."""
    try:
        if update.callback_query:
            callback = update.callback_query
            outcome = await container.dispatcher.handle_button(
                ButtonPress(sender_id=str(callback.from_user.id), payload=callback.data)
            )
            await container.messenger.deliver(outcome)
            await container.telegram_client.answer_callback_query(
                callback.id, text=outcome.notice
            )
            return

        message = update.message
        if message is None or message.from_user is None:
            return
        outcome = await container.dispatcher.handle_message(_inbound_message(message))
        await container.messenger.deliver(outcome)
    except Exception:
        logger.exception(
            "Failed to handle Telegram update", extra={"update_id": update.update_id}
        )


async def handle_whatsapp_webhook(
    container: AppContainer, payload: WhatsAppWebhook
) -> None:
    """Handle every message of a WhatsApp notification independently."""
    for message in payload.messages():
        try:
            outcome = await _dispatch_whatsapp_message(container, message)
            if outcome is not None:
                await container.messenger.deliver(outcome)
        except Exception:
            logger.exception(
                "Failed to handle WhatsApp message", extra={"message_id": message.id}
            )


async def run_polling(
    container: AppContainer,
    poll_timeout: int = 30,
    stop: asyncio.Event | None = None,
) -> None:
    """Long-poll Telegram and handle updates one at a time."""
    await sync_bot_commands(container)
    offset: int | None = None
    logger.info("Polling Telegram for updates")
    while stop is None or not stop.is_set():
        try:
            updates = await container.telegram_client.get_updates(
                offset=offset, timeout=poll_timeout
            )
        except Exception:
            logger.exception("Polling Telegram failed")
            await asyncio.sleep(_POLL_RETRY_SECONDS)
            continue
        for raw_update in updates:
            try:
                update = TelegramUpdate.model_validate(raw_update)
            except ValidationError:
                logger.warning("Skipping malformed update: %r", raw_update)
                update_id = _raw_update_id(raw_update)
                if update_id is not None:
                    offset = update_id + 1
                continue
            offset = update.update_id + 1
            await handle_telegram_update(container, update)


def _raw_update_id(raw_update: object) -> int | None:
    if not isinstance(raw_update, dict):
        return None
    try:
        return int(raw_update["update_id"])
    except (KeyError, TypeError, ValueError):
        return None


def _inbound_message(message: TelegramMessage) -> InboundMessage:
    reply = message.reply_to_message
    reply_origin = None
    if reply is not None and reply.forward_from is not None:
        reply_origin = str(reply.forward_from.id)
    return InboundMessage(
        sender_id=str(message.from_user.id) if message.from_user else "",
        text=message.text,
        reply_to_sender_id=reply_origin,
        reply_to_text=reply.text if reply is not None else None,
    )


async def _dispatch_whatsapp_message(
    container: AppContainer, message: WhatsAppMessage
) -> Outcome | None:
    sender = whatsapp_identity(message.from_number)
    if message.type == "interactive":
        reply = message.interactive.button_reply if message.interactive else None
        if reply is None:
            return None
        outcome = await container.dispatcher.handle_button(
            ButtonPress(sender_id=sender, payload=reply.id)
        )
        # WhatsApp has no callback answer; surface notices as messages.
        if outcome.notice:
            outcome.send(sender, outcome.notice)
        return outcome
    if message.type == "text" and message.text is not None:
        return await container.dispatcher.handle_message(
            InboundMessage(sender_id=sender, text=message.text.body)
        )
    return None
