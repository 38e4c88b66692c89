from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
    AUTH_FAILED = "AUTH_FAILED"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SessionStatus(str, Enum):
    NO_SESSION = "no-session"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring-soon"
    ACTIVE = "active"


class CheckOutcome(str, Enum):
    """Result of one expiry check, as reported to the diagnostics sink."""

    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"
    NO_SESSION = "no-session"
    PROVIDER_ERROR = "provider-error"
