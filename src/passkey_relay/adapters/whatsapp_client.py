"""WhatsApp Cloud API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

GRAPH_API_URL = "https://graph.facebook.com/v20.0"


class WhatsAppClient(Protocol):
    """Interface for WhatsApp Cloud API interactions."""

    async def send_text(self, to: str, text: str) -> None:
        """Send a plain text message."""

    async def send_buttons(
        self, to: str, text: str, buttons: list[tuple[str, str]]
    ) -> None:
        """Send a message with reply buttons given as (id, title) pairs."""


@dataclass
class HttpxWhatsAppClient:
    """WhatsApp client implemented with httpx."""

    access_token: str
    phone_number_id: str
    http_client: httpx.AsyncClient
    base_url: str = GRAPH_API_URL

    @classmethod
    def create(cls, access_token: str, phone_number_id: str) -> "HttpxWhatsAppClient":
        """Create a WhatsApp client with a managed httpx session."""
        return cls(
            access_token=access_token,
            phone_number_id=phone_number_id,
            http_client=httpx.AsyncClient(),
        )

    async def _post(self, payload: dict[str, object]) -> None:
        url = f"{self.base_url}/{self.phone_number_id}/messages"
        response = await self.http_client.post(
            url,
            json={"messaging_product": "whatsapp", **payload},
            headers={"Authorization": f"Bearer {self.access_token}"},
            timeout=10,
        )
        response.raise_for_status()

    async def send_text(self, to: str, text: str) -> None:
        """Send a text message."""
        await self._post({"to": to, "type": "text", "text": {"body": text}})

    async def send_buttons(
        self, to: str, text: str, buttons: list[tuple[str, str]]
    ) -> None:
        """Send an interactive message with reply buttons."""
        await self._post(
            {
                "to": to,
                "type": "interactive",
                "interactive": {
                    "type": "button",
                    "body": {"text": text},
                    "action": {
                        "buttons": [
                            {"type": "reply", "reply": {"id": button_id, "title": title}}
                            for button_id, title in buttons
                        ]
                    },
                },
            }
        )

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
