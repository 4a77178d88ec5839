"""Bot command configuration and parsing."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Request access to the bot")
    VERIFY = TelegramCommand("verify", "Unlock the bot with your passkey")
    CONNECT = TelegramCommand("connect", "Admin: open a chat with a user")
    BROADCAST = TelegramCommand("broadcast", "Admin: send messages to all users")
    DISCONNECT = TelegramCommand("disconnect", "Admin: end chats and broadcast")


@dataclass(frozen=True)
class CommandInvocation:
    """A recognized command with its optional argument."""

    command: BotCommand
    argument: str | None = None


_BY_NAME = {entry.value.command: entry for entry in BotCommand}


def parse_command(text: str | None) -> CommandInvocation | None:
    """Parse '/name[@bot] [argument]' into a recognized command."""
    if not text or not text.startswith("/"):
        return None
    head, *rest = text.strip().split(maxsplit=1)
    name = head[1:].split("@", maxsplit=1)[0].lower()
    command = _BY_NAME.get(name)
    if command is None:
        return None
    argument = rest[0].strip() if rest else None
    return CommandInvocation(command=command, argument=argument)


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
