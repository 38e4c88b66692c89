from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Protocol

import httpx
from pydantic import ValidationError

from interndin.clients.token_store import TokenStore
from interndin.config import Settings
from interndin.core.exceptions import AuthError, ProviderUnavailableError
from interndin.core.logging import get_diagnostics_logger, get_logger
from interndin.schemas.session import Session, SessionResult
from interndin.utils.retry import with_retry

logger = get_logger(__name__)
diagnostics_log = get_diagnostics_logger("auth_provider")

TOKEN_PATH = "/auth/v1/token"
LOGOUT_PATH = "/auth/v1/logout"


class AuthProvider(Protocol):
    """What the session monitor needs from an auth backend."""

    async def get_session(self) -> SessionResult: ...

    async def refresh_session(self) -> SessionResult: ...


class SupabaseAuthClient:
    """GoTrue auth client that keeps the current session in a TokenStore."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        store: TokenStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._settings = settings
        self._store = store
        self._clock = clock
        self._refresh_task: asyncio.Task[SessionResult] | None = None

    @property
    def storage_key(self) -> str:
        return self._settings.storage_key

    async def get_session(self) -> SessionResult:
        raw = self._store.get(self.storage_key)
        if raw is None:
            return SessionResult(session=None)
        try:
            return SessionResult(session=Session.model_validate_json(raw))
        except ValidationError as exc:
            diagnostics_log.warning("stored_session_invalid", key=self.storage_key, error=str(exc))
            return SessionResult(error=f"stored session is invalid: {exc.error_count()} errors")

    async def refresh_session(self) -> SessionResult:
        current = await self.get_session()
        if current.error:
            return current
        if current.session is None or not current.session.refresh_token:
            return SessionResult(error="no refresh token available")

        try:
            payload = await self._post_token(
                "refresh_token", {"refresh_token": current.session.refresh_token}
            )
            session = self._session_from_payload(payload)
        except httpx.HTTPStatusError as exc:
            return SessionResult(
                error=f"refresh rejected (HTTP {exc.response.status_code}): "
                f"{_error_message(exc.response)}"
            )
        except httpx.HTTPError as exc:
            return SessionResult(error=f"refresh failed: {exc!r}")
        except ValueError as exc:
            return SessionResult(error=f"refresh returned a malformed session: {exc}")

        self._persist(session)
        diagnostics_log.info("session_refreshed", expires_at=session.expires_at)
        return SessionResult(session=session)

    async def ensure_fresh_session(self) -> SessionResult:
        """Refresh the stored session if it expires within the refresh threshold.

        Concurrent callers share one in-flight refresh.
        """
        current = await self.get_session()
        if current.error or current.session is None or not current.session.refresh_token:
            return current

        remaining = current.session.expires_at - self._clock()
        if remaining > self._settings.SESSION_REFRESH_THRESHOLD_SECONDS:
            return current

        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self.refresh_session())
            self._refresh_task.add_done_callback(self._clear_refresh_task)
        return await asyncio.shield(self._refresh_task)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        if not email or not password:
            raise AuthError(message="Email and password are required")

        try:
            payload = await self._post_token("password", {"email": email, "password": password})
            session = self._session_from_payload(payload)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status in (400, 401, 422):
                raise AuthError(
                    message="Invalid login credentials",
                    detail=_error_message(exc.response),
                ) from exc
            raise ProviderUnavailableError(
                message=f"Auth provider error (HTTP {status})",
                detail=_error_message(exc.response),
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message="Auth provider unreachable",
                detail=repr(exc),
            ) from exc
        except ValueError as exc:
            raise ProviderUnavailableError(
                message="Auth provider returned a malformed session",
                detail=str(exc),
            ) from exc

        self._persist(session)
        logger.info("login_success", email=email)
        return session

    async def sign_out(self) -> None:
        """Revoke the session at the provider and clear it locally.

        The local session is cleared even when the provider call fails.
        """
        current = await self.get_session()
        try:
            if current.session is not None:
                resp = await self._client.post(
                    LOGOUT_PATH,
                    headers={"Authorization": f"Bearer {current.session.access_token}"},
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("logout_request_failed", error=repr(exc))
        finally:
            self._store.remove(self.storage_key)
            logger.info("logout_complete")

    async def _post_token(self, grant_type: str, body: dict[str, Any]) -> dict[str, Any]:
        @with_retry(self._settings.MAX_RETRIES, self._settings.BACKOFF_FACTOR)
        async def _send() -> httpx.Response:
            return await self._client.post(
                TOKEN_PATH, params={"grant_type": grant_type}, json=body
            )

        resp = await _send()
        resp.raise_for_status()
        return resp.json()

    def _session_from_payload(self, payload: dict[str, Any]) -> Session:
        data = dict(payload)
        if data.get("expires_at") is None and data.get("expires_in") is not None:
            data["expires_at"] = int(self._clock()) + int(data["expires_in"])
        return Session.model_validate(data)

    def _persist(self, session: Session) -> None:
        self._store.set(self.storage_key, session.model_dump_json())

    def _clear_refresh_task(self, _task: asyncio.Task[SessionResult]) -> None:
        self._refresh_task = None


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip()[:200]
    if isinstance(data, dict):
        for field in ("error_description", "msg", "message", "error"):
            if data.get(field):
                return str(data[field])
    return str(data)[:200]
