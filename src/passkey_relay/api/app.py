"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from passkey_relay.api.admin import router as admin_router
from passkey_relay.api.telegram_models import TelegramUpdate
from passkey_relay.api.whatsapp_models import WhatsAppWebhook
from passkey_relay.app_logging import configure_logging
from passkey_relay.containers import AppContainer
from passkey_relay.handlers import (
    handle_telegram_update,
    handle_whatsapp_webhook,
    sync_bot_commands,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await sync_bot_commands(app.state.container)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        await handle_telegram_update(request.app.state.container, update)
        return {"status": "ok"}

    @app.get("/whatsapp/webhook", response_class=PlainTextResponse)
    async def whatsapp_verify(
        request: Request,
        mode: str | None = Query(default=None, alias="hub.mode"),
        verify_token: str | None = Query(default=None, alias="hub.verify_token"),
        challenge: str = Query(default="", alias="hub.challenge"),
    ) -> str:
        """Answer the WhatsApp webhook verification handshake."""
        state_container: AppContainer = request.app.state.container
        expected = state_container.settings.whatsapp_verify_token
        if mode != "subscribe" or not expected or verify_token != expected:
            logger.warning("Rejected WhatsApp webhook verification")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
        return challenge

    @app.post("/whatsapp/webhook")
    async def whatsapp_webhook(
        payload: WhatsAppWebhook, request: Request
    ) -> dict[str, str]:
        """Handle WhatsApp Cloud API notifications."""
        await handle_whatsapp_webhook(request.app.state.container, payload)
        return {"status": "ok"}

    return app
