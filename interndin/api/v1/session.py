from __future__ import annotations

from fastapi import APIRouter, Depends

from interndin.api.deps import get_auth_client, get_session_monitor
from interndin.core.exceptions import NoActiveSessionError
from interndin.schemas.responses import RefreshResponse, SessionInfo, SessionStatusResponse
from interndin.services.auth_provider import SupabaseAuthClient
from interndin.services.session_monitor import SessionMonitor

router = APIRouter(prefix="/session")


@router.get("", response_model=SessionInfo)
async def get_session(
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    monitor: SessionMonitor = Depends(get_session_monitor),
) -> SessionInfo:
    # Sessions close to expiry are refreshed before being handed out.
    await auth_client.ensure_fresh_session()
    session = await monitor.get_session_data()
    if session is None:
        raise NoActiveSessionError(message="No active session")
    return SessionInfo.from_session(session)


@router.get("/status", response_model=SessionStatusResponse)
async def get_session_status(
    monitor: SessionMonitor = Depends(get_session_monitor),
) -> SessionStatusResponse:
    return SessionStatusResponse(status=await monitor.get_session_status())


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_session(
    monitor: SessionMonitor = Depends(get_session_monitor),
) -> RefreshResponse:
    return RefreshResponse(refreshed=await monitor.refresh_session())
