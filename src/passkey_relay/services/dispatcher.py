"""Dispatch of parsed inbound events to the core services."""

import logging
from dataclasses import dataclass

from passkey_relay.domain.actions import CallbackKind, parse_callback_data
from passkey_relay.domain.messages import ButtonPress, InboundMessage, Outcome
from passkey_relay.services.access import AccessController
from passkey_relay.services.relay import RelayRouter
from passkey_relay.telegram_commands import BotCommand, parse_command

logger = logging.getLogger(__name__)


@dataclass
class Dispatcher:
    """Parses commands and button payloads once and routes them."""

    access: AccessController
    relay: RelayRouter

    async def handle_message(self, message: InboundMessage) -> Outcome:
        """Handle a text message; recognized commands are never relayed."""
        invocation = parse_command(message.text)
        if invocation is None:
            return await self.relay.route(message)

        sender = message.sender_id
        argument = invocation.argument
        match invocation.command:
            case BotCommand.START:
                return await self.access.handle_first_contact(sender)
            case BotCommand.VERIFY:
                if argument is None:
                    return _usage(sender, "Usage: /verify <passkey>")
                return await self.access.verify_submission(sender, argument)
            case BotCommand.CONNECT:
                if argument is None:
                    return await self._connect_usage(sender)
                return await self.relay.connect(sender, argument)
            case BotCommand.BROADCAST:
                return await self.relay.broadcast(sender)
            case BotCommand.DISCONNECT:
                return await self.relay.disconnect(sender)

    async def handle_button(self, press: ButtonPress) -> Outcome:
        """Handle a button press by its parsed action."""
        action = parse_callback_data(press.payload)
        if action is None:
            logger.info("Ignoring unknown button payload %r", press.payload)
            return Outcome(notice="Unknown action.")

        match action.kind:
            case CallbackKind.AUTHORIZE_REQUEST:
                return await self.access.decide_request(
                    press.sender_id, action.user_id, approve=True
                )
            case CallbackKind.IGNORE_REQUEST:
                return await self.access.decide_request(
                    press.sender_id, action.user_id, approve=False
                )
            case CallbackKind.SEND_PASSKEY:
                return await self.access.decide_delivery(
                    press.sender_id, action.user_id, send=True
                )
            case CallbackKind.CANCEL_PASSKEY:
                return await self.access.decide_delivery(
                    press.sender_id, action.user_id, send=False
                )

    async def _connect_usage(self, sender: str) -> Outcome:
        async with self.relay.store.snapshot() as state:
            if not state.is_admin(sender):
                return Outcome()
        return _usage(sender, "Usage: /connect <user id>")


def _usage(recipient: str, text: str) -> Outcome:
    outcome = Outcome()
    outcome.send(recipient, text)
    return outcome
