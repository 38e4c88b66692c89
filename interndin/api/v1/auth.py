from __future__ import annotations

from fastapi import APIRouter, Depends

from interndin.api.deps import get_auth_client
from interndin.schemas.requests import LoginRequest
from interndin.schemas.responses import LogoutResponse, SessionInfo
from interndin.services.auth_provider import SupabaseAuthClient

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=SessionInfo)
async def login(
    body: LoginRequest,
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> SessionInfo:
    session = await auth_client.sign_in_with_password(body.email, body.password)
    return SessionInfo.from_session(session)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> LogoutResponse:
    await auth_client.sign_out()
    return LogoutResponse()
