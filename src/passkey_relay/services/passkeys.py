"""One-time numeric passkeys."""

import secrets
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from passkey_relay.domain.state import BotState, PasskeyRecord


class PasskeySpaceExhaustedError(RuntimeError):
    """Raised when every key of the configured length is already taken."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def generate(length: int, taken: Collection[str]) -> str:
    """Return a random decimal key of ``length`` digits not present in ``taken``."""
    if length < 1:
        raise ValueError("Passkey length must be positive")
    if len(set(taken)) >= 10**length:
        raise PasskeySpaceExhaustedError(
            f"All {10**length} passkeys of length {length} are in use"
        )
    while True:
        key = "".join(str(secrets.randbelow(10)) for _ in range(length))
        if key not in taken:
            return key


@dataclass
class PasskeyManager:
    """Generates, validates and expires passkeys stored on the bot state.

    Callers run these operations inside a state transaction, which persists
    the result.
    """

    clock: Callable[[], datetime] = field(default=_utcnow)

    def issue(self, state: BotState, user_id: str) -> PasskeyRecord:
        """Create a fresh passkey for the user, replacing any previous one."""
        taken = {record.key for record in state.active_passkeys.values()}
        record = PasskeyRecord(
            key=generate(state.passkey_length, taken),
            expires_at=self.clock()
            + timedelta(minutes=state.passkey_timeout_minutes),
        )
        state.active_passkeys[user_id] = record
        return record

    def verify(self, state: BotState, user_id: str, candidate: str) -> bool:
        """Check a submitted key; drops the record when it has expired."""
        record = state.active_passkeys.get(user_id)
        if record is None:
            return False
        if not secrets.compare_digest(
            record.key.encode(), candidate.strip().encode()
        ):
            return False
        if self.is_expired(record):
            del state.active_passkeys[user_id]
            return False
        return True

    def revoke(self, state: BotState, user_id: str) -> None:
        """Remove any passkey held for the user."""
        state.active_passkeys.pop(user_id, None)

    def is_expired(self, record: PasskeyRecord) -> bool:
        """Return true once the record's expiry has passed."""
        return self.clock() > record.expires_at
