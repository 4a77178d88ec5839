"""Pydantic models for WhatsApp Cloud API webhook payloads."""

from pydantic import BaseModel, Field


class WhatsAppText(BaseModel):
    """Text body of a message."""

    body: str


class WhatsAppButtonReply(BaseModel):
    """Reply button chosen by the sender."""

    id: str
    title: str | None = None


class WhatsAppInteractive(BaseModel):
    """Interactive message payload."""

    type: str
    button_reply: WhatsAppButtonReply | None = None


class WhatsAppMessage(BaseModel):
    """Inbound WhatsApp message."""

    id: str
    from_number: str = Field(alias="from")
    type: str
    text: WhatsAppText | None = None
    interactive: WhatsAppInteractive | None = None


class WhatsAppValue(BaseModel):
    """Change value carrying messages."""

    messages: list[WhatsAppMessage] = Field(default_factory=list)


class WhatsAppChange(BaseModel):
    """Single webhook change entry."""

    field: str | None = None
    value: WhatsAppValue


class WhatsAppEntry(BaseModel):
    """Webhook entry for one business account."""

    id: str | None = None
    changes: list[WhatsAppChange] = Field(default_factory=list)


class WhatsAppWebhook(BaseModel):
    """WhatsApp webhook notification payload."""

    object: str | None = None
    entry: list[WhatsAppEntry] = Field(default_factory=list)

    def messages(self) -> list[WhatsAppMessage]:
        """Return every message contained in the notification."""
        return [
            message
            for entry in self.entry
            for change in entry.changes
            for message in change.value.messages
        ]
