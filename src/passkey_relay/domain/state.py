"""Persisted bot state schema."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

SCHEMA_VERSION = 1


class UserRecord(BaseModel):
    """An identity that has reached active status."""

    model_config = ConfigDict(extra="allow")

    active: bool = False
    numbers: list[str] = Field(default_factory=list)
    deleted_messages: list[Any] = Field(default_factory=list)


class PasskeyRecord(BaseModel):
    """An outstanding one-time passkey."""

    key: str
    expires_at: datetime

    @field_validator("expires_at", mode="before")
    @classmethod
    def _parse_epoch_millis(cls, value: object) -> object:
        # Older state files store expiry as epoch milliseconds.
        if isinstance(value, int | float) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        return value

    @field_validator("expires_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class BotState(BaseModel):
    """Single aggregate holding all access-control and relay state."""

    model_config = ConfigDict(extra="allow", validate_assignment=False)

    schema_version: int = SCHEMA_VERSION
    bot_token: str = ""
    admin_id: str = ""
    users: dict[str, UserRecord] = Field(default_factory=dict)
    pending_requests: set[str] = Field(default_factory=set)
    active_passkeys: dict[str, PasskeyRecord] = Field(default_factory=dict)
    active_connections: set[str] = Field(default_factory=set)
    broadcast_mode: bool = False
    passkey_length: int = Field(default=6, ge=1, le=32)
    passkey_timeout_minutes: int = Field(default=30, ge=1)

    @field_validator("admin_id", mode="before")
    @classmethod
    def _coerce_admin_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("pending_requests", "active_connections", mode="before")
    @classmethod
    def _coerce_id_set(cls, value: object) -> object:
        # Older state files store sets as {"<id>": true} mappings.
        if isinstance(value, dict):
            return {str(key) for key, flag in value.items() if flag}
        if isinstance(value, list | tuple | set):
            return {str(item) for item in value}
        return value

    @field_serializer("pending_requests", "active_connections")
    def _serialize_id_set(self, value: set[str]) -> list[str]:
        return sorted(value)

    def is_admin(self, user_id: str) -> bool:
        """Return true when the identity is the configured admin."""
        return bool(self.admin_id) and str(user_id) == self.admin_id

    def is_active(self, user_id: str) -> bool:
        """Return true when the identity holds an active user record."""
        record = self.users.get(user_id)
        return record is not None and record.active

    def seed_admin(self) -> bool:
        """Ensure the admin holds an active record; return true if changed."""
        if not self.admin_id:
            return False
        record = self.users.get(self.admin_id)
        if record is not None and record.active:
            return False
        if record is None:
            self.users[self.admin_id] = UserRecord(active=True)
        else:
            record.active = True
        return True

    def to_document(self) -> dict[str, object]:
        """Serialize the state into a JSON-compatible document."""
        return self.model_dump(mode="json")
