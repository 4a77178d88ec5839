"""Single authority over the persisted bot state."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from passkey_relay.domain.state import SCHEMA_VERSION, BotState

logger = logging.getLogger(__name__)


class StateRepository(Protocol):
    """Durable storage for the whole state document."""

    def load(self) -> dict[str, object] | None:
        """Return the stored document, or None on first run."""

    def save(self, document: dict[str, object]) -> None:
        """Replace the stored document."""


class StateLoadError(RuntimeError):
    """Raised when stored state cannot be read or validated."""


class StatePersistenceError(RuntimeError):
    """Raised when a state transition cannot be saved."""


@dataclass
class StateStore:
    """Owns the in-process state and serializes every transition.

    All read-decide-write sequences run inside :meth:`transaction`, which holds
    one exclusive lock for the whole sequence and saves before releasing it.
    """

    repository: StateRepository
    state: BotState
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @classmethod
    def open(
        cls,
        repository: StateRepository,
        *,
        admin_id: str | None = None,
        passkey_length: int | None = None,
        passkey_timeout_minutes: int | None = None,
    ) -> "StateStore":
        """Load stored state (or defaults), apply startup config and persist."""
        state = _load_state(repository)
        if admin_id and admin_id.strip():
            configured = admin_id.strip()
            if not state.admin_id:
                state.admin_id = configured
            elif state.admin_id != configured:
                logger.warning(
                    "Configured admin id differs from stored admin; keeping %s",
                    state.admin_id,
                )
        if passkey_length is not None:
            state.passkey_length = passkey_length
        if passkey_timeout_minutes is not None:
            state.passkey_timeout_minutes = passkey_timeout_minutes
        if not state.admin_id:
            logger.warning("No admin configured; admin-only actions are disabled")
        state.seed_admin()
        store = cls(repository=repository, state=state)
        store.save_now()
        return store

    def save_now(self) -> None:
        """Persist the current state outside of a transaction."""
        try:
            self.repository.save(self.state.to_document())
        except Exception as exc:
            raise StatePersistenceError("Failed to save bot state") from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[BotState]:
        """Yield the live state under the lock and save it on clean exit.

        On any error, including a failed save, the in-memory state is rolled
        back to what it was when the transaction started.
        """
        async with self._lock:
            before = self.state.model_copy(deep=True)
            try:
                yield self.state
                if self.state != before:
                    self.save_now()
            except BaseException:
                self.state = before
                raise

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[BotState]:
        """Yield a consistent copy of the state for read-only use."""
        async with self._lock:
            yield self.state.model_copy(deep=True)


def _load_state(repository: StateRepository) -> BotState:
    try:
        document = repository.load()
    except Exception as exc:
        raise StateLoadError("Failed to read bot state") from exc
    if document is None:
        logger.info("No stored state found; creating defaults")
        return BotState()
    if not isinstance(document, dict):
        raise StateLoadError("Stored bot state is not a JSON object")
    version = document.get("schema_version", SCHEMA_VERSION)
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        raise StateLoadError(f"Unsupported state schema version: {version!r}")
    try:
        return BotState.model_validate(document)
    except ValidationError as exc:
        raise StateLoadError("Stored bot state is invalid") from exc
