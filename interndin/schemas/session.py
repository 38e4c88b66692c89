from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from interndin.schemas.enums import CheckOutcome


class Session(BaseModel):
    """Session as issued by the auth provider (GoTrue token response shape)."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: float = Field(..., description="Absolute expiry, epoch seconds")
    user: dict[str, Any] | None = None


class SessionResult(BaseModel):
    """Provider call result: either a session (possibly None) or an error."""

    session: Session | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CheckResult(BaseModel):
    outcome: CheckOutcome
    minutes_until_expiry: float | None = None
    detail: str | None = None
