"""Long-polling entrypoint for the passkey relay bot."""

import asyncio
import logging
import sys

from pydantic import ValidationError

from passkey_relay.app_logging import configure_logging
from passkey_relay.config import ConfigurationError, Settings
from passkey_relay.containers import AppContainer, build_container
from passkey_relay.handlers import run_polling
from passkey_relay.services.state_store import StateLoadError, StatePersistenceError

logger = logging.getLogger("passkey_relay.main")


def main(settings: Settings | None = None) -> int:
    """Start the bot and poll Telegram until interrupted; return the exit code."""
    configure_logging()
    prompt = input if sys.stdin.isatty() else None
    try:
        container = build_container(settings, prompt=prompt)
    except (
        ConfigurationError,
        StateLoadError,
        StatePersistenceError,
        ValidationError,
    ) as exc:
        logger.error("Startup failed: %s", exc)
        return 1

    try:
        asyncio.run(_serve(container))
    except KeyboardInterrupt:
        logger.info("Stopped")
    return 0


async def _serve(container: AppContainer) -> None:
    logger.info("Passkey relay bot running")
    try:
        await run_polling(container)
    finally:
        await container.close_resources()


if __name__ == "__main__":
    raise SystemExit(main())
