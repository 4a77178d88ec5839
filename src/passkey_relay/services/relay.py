"""Message relay between the admin and approved users."""

import logging
import re
from dataclasses import dataclass

from passkey_relay.domain.messages import InboundMessage, Outcome
from passkey_relay.services.state_store import StateStore

logger = logging.getLogger(__name__)

BROADCAST_PREFIX = "📢 Admin Broadcast: "
ADMIN_PREFIX = "💬 Admin: "

_RELAY_TAG = re.compile(r"^💬 (?P<user_id>\S+?): ")


def relay_tag(user_id: str, text: str) -> str:
    """Tag user text relayed to the admin with the sender identity."""
    return f"💬 {user_id}: {text}"


def parse_relay_tag(text: str | None) -> str | None:
    """Return the sender identity of a relayed message, if tagged."""
    if not text:
        return None
    match = _RELAY_TAG.match(text)
    if match is None or match.group("user_id") == "Admin":
        return None
    return match.group("user_id")


@dataclass
class RelayRouter:
    """Routes non-command content and handles admin relay commands."""

    store: StateStore

    async def connect(self, actor_id: str, target_user_id: str) -> Outcome:
        """Open a direct admin session with a known user."""
        outcome = Outcome()
        async with self.store.transaction() as state:
            if not state.is_admin(actor_id):
                return outcome
            if target_user_id not in state.users:
                outcome.send(actor_id, "User not found.")
                return outcome
            state.active_connections.add(target_user_id)
            outcome.send(actor_id, f"✅ Connected to user {target_user_id}.")
            outcome.send(
                target_user_id,
                "💬 Admin is now connected. You can chat through the bot.",
            )
        logger.info("Admin connected to %s", target_user_id)
        return outcome

    async def broadcast(self, actor_id: str) -> Outcome:
        """Turn on sticky broadcast mode."""
        outcome = Outcome()
        async with self.store.transaction() as state:
            if not state.is_admin(actor_id):
                return outcome
            state.broadcast_mode = True
            outcome.send(
                actor_id,
                "📢 Broadcast mode activated. Messages will be sent to all users.",
            )
        return outcome

    async def disconnect(self, actor_id: str) -> Outcome:
        """Drop every direct session and end broadcast mode."""
        outcome = Outcome()
        async with self.store.transaction() as state:
            if not state.is_admin(actor_id):
                return outcome
            state.active_connections.clear()
            state.broadcast_mode = False
            outcome.send(actor_id, "❌ Disconnected from all users / broadcast ended.")
        return outcome

    async def route(self, message: InboundMessage) -> Outcome:
        """Decide where a content message goes."""
        outcome = Outcome()
        async with self.store.snapshot() as state:
            sender = message.sender_id
            if state.is_admin(sender):
                if state.broadcast_mode and message.text:
                    # Every known identity receives it, active or not.
                    for user_id in state.users:
                        outcome.send(user_id, f"{BROADCAST_PREFIX}{message.text}")
                    return outcome
                target = message.reply_to_sender_id or parse_relay_tag(
                    message.reply_to_text
                )
                if (
                    target is not None
                    and target in state.active_connections
                    and message.text
                ):
                    outcome.send(target, f"{ADMIN_PREFIX}{message.text}")
                return outcome

            if not message.text or not state.admin_id:
                return outcome
            if state.is_active(sender) or sender in state.active_connections:
                outcome.send(state.admin_id, relay_tag(sender, message.text))
        return outcome
