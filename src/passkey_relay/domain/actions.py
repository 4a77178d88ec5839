"""Button payload actions."""

from dataclasses import dataclass
from enum import Enum


class CallbackKind(Enum):
    """Admin decisions that can be attached to a button."""

    AUTHORIZE_REQUEST = "authorize_request"
    IGNORE_REQUEST = "ignore_request"
    SEND_PASSKEY = "send_passkey"
    CANCEL_PASSKEY = "cancel_passkey"


@dataclass(frozen=True)
class CallbackAction:
    """Decision kind plus the identity it targets."""

    kind: CallbackKind
    user_id: str

    def encode(self) -> str:
        """Encode the action as an opaque button payload."""
        return f"{self.kind.value}_{self.user_id}"


def parse_callback_data(data: str | None) -> CallbackAction | None:
    """Parse payloads in the format <kind>_<user id>."""
    if not data:
        return None
    for kind in CallbackKind:
        prefix = f"{kind.value}_"
        if data.startswith(prefix):
            user_id = data[len(prefix) :]
            if not user_id:
                return None
            return CallbackAction(kind=kind, user_id=user_id)
    return None
