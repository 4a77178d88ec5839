"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from passkey_relay.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/state", dependencies=[Depends(require_admin)])
async def relay_state(request: Request) -> dict[str, object]:
    """Return access and relay state without passkey values."""
    container: AppContainer = request.app.state.container
    async with container.store.snapshot() as state:
        return {
            "admin_id": state.admin_id,
            "users": {
                user_id: {"active": record.active}
                for user_id, record in sorted(state.users.items())
            },
            "pending_requests": sorted(state.pending_requests),
            "active_passkeys": {
                user_id: {"expires_at": record.expires_at.isoformat()}
                for user_id, record in sorted(state.active_passkeys.items())
            },
            "active_connections": sorted(state.active_connections),
            "broadcast_mode": state.broadcast_mode,
        }
