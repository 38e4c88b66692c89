from __future__ import annotations


class InternDinBaseError(Exception):
    """Base exception for all InternDin session service errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class ProviderUnavailableError(InternDinBaseError):
    status_code = 502
    error_code = "PROVIDER_UNAVAILABLE"


class NoActiveSessionError(InternDinBaseError):
    status_code = 401
    error_code = "NO_ACTIVE_SESSION"


class AuthError(InternDinBaseError):
    status_code = 401
    error_code = "AUTH_FAILED"


class AlreadyInitializedError(InternDinBaseError):
    status_code = 409
    error_code = "ALREADY_INITIALIZED"
