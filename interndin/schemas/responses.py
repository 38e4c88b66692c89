from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from interndin.core.logging import SERVICE_NAME
from interndin.schemas.enums import ErrorCode, SessionStatus
from interndin.schemas.session import Session


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = SERVICE_NAME
    session_monitor_running: bool = False


class SessionInfo(BaseModel):
    """Public view of a session: never exposes the tokens."""

    expires_at: float = Field(..., description="Absolute expiry, epoch seconds")
    token_type: str = "bearer"
    user_id: str | None = None
    email: str | None = None
    role: str | None = None

    @classmethod
    def from_session(cls, session: Session) -> SessionInfo:
        user: dict[str, Any] = session.user or {}
        metadata = user.get("user_metadata") or {}
        return cls(
            expires_at=session.expires_at,
            token_type=session.token_type,
            user_id=user.get("id"),
            email=user.get("email"),
            role=metadata.get("role") or user.get("role"),
        )


class SessionStatusResponse(BaseModel):
    status: SessionStatus


class RefreshResponse(BaseModel):
    refreshed: bool


class LogoutResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error_code: ErrorCode
    message: str
    detail: str | None = None
