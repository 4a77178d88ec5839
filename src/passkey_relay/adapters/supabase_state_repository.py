"""Supabase-backed state repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from passkey_relay.services.state_store import StateRepository


@dataclass
class SupabaseStateRepository(StateRepository):
    """Supabase implementation storing the document in a single row."""

    client: Client
    table: str = "bot_state"
    row_id: str = "default"

    def load(self) -> dict[str, object] | None:
        """Return the stored document, if the row exists."""
        response = (
            self.client.table(self.table)
            .select("id, document")
            .eq("id", self.row_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("document")

    def save(self, document: dict[str, object]) -> None:
        """Upsert the document row."""
        response = (
            self.client.table(self.table)
            .upsert(
                {
                    "id": self.row_id,
                    "document": document,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save bot state in Supabase")
