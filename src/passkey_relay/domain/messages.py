"""Transport-neutral inbound events and outbound messages."""

from dataclasses import dataclass, field

from passkey_relay.domain.actions import CallbackAction


@dataclass(frozen=True)
class Button:
    """Inline action attached to an outbound message."""

    text: str
    action: CallbackAction


@dataclass(frozen=True)
class OutboundMessage:
    """A message the core wants delivered."""

    recipient: str
    text: str
    buttons: tuple[Button, ...] = ()
    markdown: bool = False


@dataclass
class Outcome:
    """Result of handling one inbound event."""

    messages: list[OutboundMessage] = field(default_factory=list)
    notice: str | None = None

    def send(
        self,
        recipient: str,
        text: str,
        buttons: tuple[Button, ...] = (),
        markdown: bool = False,
    ) -> None:
        """Queue an outbound message."""
        self.messages.append(
            OutboundMessage(
                recipient=recipient, text=text, buttons=buttons, markdown=markdown
            )
        )


@dataclass(frozen=True)
class InboundMessage:
    """A text message received from any transport."""

    sender_id: str
    text: str | None
    reply_to_sender_id: str | None = None
    reply_to_text: str | None = None


@dataclass(frozen=True)
class ButtonPress:
    """A button press carrying an opaque payload."""

    sender_id: str
    payload: str | None
