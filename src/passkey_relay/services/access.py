"""Access-control state machine for the relay bot."""

import logging
from dataclasses import dataclass

from passkey_relay.domain.actions import CallbackAction, CallbackKind
from passkey_relay.domain.messages import Button, Outcome
from passkey_relay.domain.state import BotState, UserRecord
from passkey_relay.services.passkeys import PasskeyManager
from passkey_relay.services.state_store import StateStore

logger = logging.getLogger(__name__)

NOT_ADMIN_NOTICE = "❌ You are not admin"
NOTHING_TO_DO_NOTICE = "Nothing to do."


@dataclass
class AccessController:
    """Moves identities from unknown to pending to active.

    Every operation is one transaction on the state store and returns the
    messages to deliver once the state has been saved.
    """

    store: StateStore
    passkeys: PasskeyManager

    async def handle_first_contact(self, user_id: str) -> Outcome:
        """Handle /start from any identity."""
        outcome = Outcome()
        async with self.store.transaction() as state:
            if state.is_admin(user_id):
                state.seed_admin()
                outcome.send(user_id, "✅ Admin access granted. You have full control.")
                return outcome

            if state.is_active(user_id):
                outcome.send(
                    user_id, "✅ Bot unlocked. You can now use all permitted commands."
                )
                return outcome

            outcome.send(
                user_id, "⏳ Awaiting admin authorization. Requesting passkey..."
            )
            if user_id in state.pending_requests:
                if not self._expire_stale_passkey(state, user_id):
                    return outcome
                logger.info("Passkey for %s expired; raising a new request", user_id)

            if not state.admin_id:
                logger.warning("Access request from %s but no admin is set", user_id)
                return outcome

            state.pending_requests.add(user_id)
            outcome.send(
                state.admin_id,
                f"User {user_id} wants to access the bot.",
                buttons=(
                    Button(
                        f"✅ Authorize {user_id}",
                        CallbackAction(CallbackKind.AUTHORIZE_REQUEST, user_id),
                    ),
                    Button(
                        f"❌ Ignore {user_id}",
                        CallbackAction(CallbackKind.IGNORE_REQUEST, user_id),
                    ),
                ),
            )
        logger.info("Access request from %s is pending", user_id)
        return outcome

    async def decide_request(
        self, actor_id: str, user_id: str, approve: bool
    ) -> Outcome:
        """Authorize or ignore a pending access request."""
        outcome = Outcome()
        async with self.store.transaction() as state:
            if not state.is_admin(actor_id):
                return _denied(actor_id)
            if user_id not in state.pending_requests:
                outcome.notice = NOTHING_TO_DO_NOTICE
                return outcome

            if not approve:
                self.passkeys.revoke(state, user_id)
                state.pending_requests.discard(user_id)
                outcome.send(state.admin_id, f"Ignored access request from {user_id}.")
                outcome.send(user_id, "❌ Your access request was ignored by the admin.")
                logger.info("Access request from %s ignored", user_id)
                return outcome

            record = self.passkeys.issue(state, user_id)
            outcome.send(
                state.admin_id,
                f"Passkey generated for {user_id}: {record.key}",
                buttons=(
                    Button(
                        "✅ Send to User",
                        CallbackAction(CallbackKind.SEND_PASSKEY, user_id),
                    ),
                    Button(
                        "❌ Cancel",
                        CallbackAction(CallbackKind.CANCEL_PASSKEY, user_id),
                    ),
                ),
            )
        logger.info("Passkey issued for %s", user_id)
        return outcome

    async def decide_delivery(self, actor_id: str, user_id: str, send: bool) -> Outcome:
        """Deliver or cancel a generated passkey."""
        outcome = Outcome()
        async with self.store.transaction() as state:
            if not state.is_admin(actor_id):
                return _denied(actor_id)
            record = state.active_passkeys.get(user_id)
            if record is None:
                outcome.notice = NOTHING_TO_DO_NOTICE
                return outcome

            if not send:
                self.passkeys.revoke(state, user_id)
                state.pending_requests.discard(user_id)
                outcome.send(state.admin_id, f"Passkey sending cancelled for {user_id}.")
                outcome.send(
                    user_id, "❌ Your access request was cancelled by the admin."
                )
                logger.info("Passkey for %s cancelled", user_id)
                return outcome

            outcome.send(
                user_id,
                f"🔑 Your passkey: *{record.key}*\n"
                "Please enter it using /verify <passkey> within "
                f"{state.passkey_timeout_minutes} minutes.",
                markdown=True,
            )
            outcome.send(state.admin_id, f"Passkey sent to {user_id}.")
        return outcome

    async def verify_submission(self, user_id: str, candidate: str) -> Outcome:
        """Check a /verify submission and activate the user on success."""
        outcome = Outcome()
        async with self.store.transaction() as state:
            if state.is_admin(user_id):
                outcome.send(user_id, "✅ Admin access is always active.")
                return outcome

            had_passkey = user_id in state.active_passkeys
            if not self.passkeys.verify(state, user_id, candidate):
                if had_passkey and user_id not in state.active_passkeys:
                    state.pending_requests.discard(user_id)
                outcome.send(
                    user_id,
                    "❌ Invalid or expired passkey. "
                    "Please request a new one using /start.",
                )
                return outcome

            state.users[user_id] = UserRecord(active=True)
            self.passkeys.revoke(state, user_id)
            state.pending_requests.discard(user_id)
            outcome.send(user_id, "✅ Access granted! You can now use the bot.")
        logger.info("User %s verified", user_id)
        return outcome

    def _expire_stale_passkey(self, state: BotState, user_id: str) -> bool:
        record = state.active_passkeys.get(user_id)
        if record is None or not self.passkeys.is_expired(record):
            return False
        self.passkeys.revoke(state, user_id)
        state.pending_requests.discard(user_id)
        return True


def _denied(actor_id: str) -> Outcome:
    logger.info("Rejected admin action from %s", actor_id)
    return Outcome(notice=NOT_ADMIN_NOTICE)
