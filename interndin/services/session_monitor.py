from __future__ import annotations

import asyncio
import time
from typing import Callable

from interndin.clients.token_store import StorageEvent, TokenStore
from interndin.config import Settings
from interndin.core.exceptions import AlreadyInitializedError
from interndin.core.logging import get_diagnostics_logger, get_logger
from interndin.schemas.enums import CheckOutcome, SessionStatus
from interndin.schemas.session import CheckResult, Session
from interndin.services.auth_provider import AuthProvider

logger = get_logger(__name__)
diagnostics_log = get_diagnostics_logger("session_monitor")

DEFAULT_POLL_INTERVAL_SECONDS = 60.0
DEFAULT_WARNING_SECONDS = 300

WarningCallback = Callable[[float], None]
ExpiryCallback = Callable[[], None]
DiagnosticsSink = Callable[[CheckResult], None]

_OUTCOME_BY_STATUS = {
    SessionStatus.ACTIVE: CheckOutcome.ACTIVE,
    SessionStatus.EXPIRING_SOON: CheckOutcome.WARNING,
    SessionStatus.EXPIRED: CheckOutcome.EXPIRED,
}

_EXPIRY_OUTCOMES = frozenset(
    {CheckOutcome.EXPIRED, CheckOutcome.NO_SESSION, CheckOutcome.PROVIDER_ERROR}
)


def classify_remaining(seconds_remaining: float, warning_seconds: float) -> SessionStatus:
    """Classify a live session by its remaining lifetime.

    Shared by the poll and by get_session_status so both always agree.
    """
    if seconds_remaining <= 0:
        return SessionStatus.EXPIRED
    if seconds_remaining <= warning_seconds:
        return SessionStatus.EXPIRING_SOON
    return SessionStatus.ACTIVE


class _Registration:
    """One listener registration; removed by identity, so duplicates are independent."""

    __slots__ = ("callback",)

    def __init__(self, callback: Callable) -> None:
        self.callback = callback


class SessionMonitor:
    """Polls the auth provider for session expiry and notifies listeners.

    Warning listeners receive the minutes remaining while the session is inside
    the warning window; expiry listeners fire once the session has expired, is
    absent, or cannot be fetched. Notifications are level-triggered: they repeat
    on every check while the condition holds.
    """

    def __init__(
        self,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        warning_seconds: float = DEFAULT_WARNING_SECONDS,
        token_key_marker: str = "auth-token",
        clock: Callable[[], float] = time.time,
        diagnostics: DiagnosticsSink | None = None,
        allow_reinitialize: bool = True,
    ) -> None:
        self._poll_interval = poll_interval
        self._warning_seconds = warning_seconds
        self._token_key_marker = token_key_marker
        self._clock = clock
        self._diagnostics = diagnostics
        self._allow_reinitialize = allow_reinitialize

        self._auth_client: AuthProvider | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._inflight: asyncio.Task[CheckResult] | None = None
        self._pending: set[asyncio.Task[CheckResult]] = set()
        self._unsubscribe_storage: Callable[[], None] | None = None

        self._warning_callbacks: list[_Registration] = []
        self._expiry_callbacks: list[_Registration] = []

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> SessionMonitor:
        return cls(
            poll_interval=settings.SESSION_POLL_INTERVAL_SECONDS,
            warning_seconds=settings.SESSION_WARNING_SECONDS,
            token_key_marker=settings.AUTH_TOKEN_KEY_MARKER,
            **kwargs,
        )

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    # Lifecycle

    async def initialize(
        self, auth_client: AuthProvider, store: TokenStore | None = None
    ) -> CheckResult:
        """Bind to a provider, run one immediate check and start polling.

        Any previous poll and storage subscription are released first.
        """
        if self.running and not self._allow_reinitialize:
            raise AlreadyInitializedError(
                message="Session monitor is already running",
                detail="call destroy() before initialize()",
            )
        await self._stop()

        self._auth_client = auth_client
        if store is not None:
            self._unsubscribe_storage = store.subscribe(self._on_storage_event)

        result = await self.check_session_expiry()
        self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info(
            "session_monitor_started",
            poll_interval=self._poll_interval,
            warning_seconds=self._warning_seconds,
            initial_outcome=result.outcome.value,
        )
        return result

    async def destroy(self) -> None:
        """Stop polling, release the storage subscription and drop all listeners."""
        await self._stop()
        self._warning_callbacks.clear()
        self._expiry_callbacks.clear()
        logger.info("session_monitor_destroyed")

    async def _stop(self) -> None:
        if self._unsubscribe_storage is not None:
            self._unsubscribe_storage()
            self._unsubscribe_storage = None

        current = asyncio.current_task()
        owned = (self._poll_task, self._inflight, *self._pending)
        tasks = [t for t in owned if t is not None and t is not current and not t.done()]
        self._poll_task = None
        self._inflight = None
        self._pending.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            await self.check_session_expiry()

    # Checks

    async def check_session_expiry(self) -> CheckResult:
        """Run one expiry check and notify listeners. Never raises.

        A call made while another check is in flight waits for and returns
        that check's result instead of starting a second one.
        """
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._run_check())
        return await asyncio.shield(self._inflight)

    async def _run_check(self) -> CheckResult:
        result = await self._evaluate()

        if result.outcome is CheckOutcome.WARNING:
            diagnostics_log.info(
                "session_warning", minutes_until_expiry=result.minutes_until_expiry
            )
            self._fire(self._warning_callbacks, result.minutes_until_expiry)
        elif result.outcome in _EXPIRY_OUTCOMES:
            diagnostics_log.info(
                "session_expiry", outcome=result.outcome.value, detail=result.detail
            )
            self._fire(self._expiry_callbacks)

        self._report(result)
        return result

    async def _evaluate(self) -> CheckResult:
        if self._auth_client is None:
            return CheckResult(
                outcome=CheckOutcome.PROVIDER_ERROR, detail="no auth provider bound"
            )
        try:
            fetched = await self._auth_client.get_session()
        except Exception as exc:
            return CheckResult(outcome=CheckOutcome.PROVIDER_ERROR, detail=repr(exc))

        if fetched.error:
            return CheckResult(outcome=CheckOutcome.PROVIDER_ERROR, detail=fetched.error)
        if fetched.session is None:
            return CheckResult(outcome=CheckOutcome.NO_SESSION)

        seconds_remaining = fetched.session.expires_at - self._clock()
        status = classify_remaining(seconds_remaining, self._warning_seconds)
        return CheckResult(
            outcome=_OUTCOME_BY_STATUS[status],
            minutes_until_expiry=seconds_remaining / 60,
        )

    def _fire(self, registry: list[_Registration], *args) -> None:
        for registration in list(registry):
            try:
                registration.callback(*args)
            except Exception:
                logger.error("session_callback_failed", exc_info=True)

    def _report(self, result: CheckResult) -> None:
        diagnostics_log.debug(
            "session_check",
            outcome=result.outcome.value,
            minutes_until_expiry=result.minutes_until_expiry,
            detail=result.detail,
        )
        if self._diagnostics is None:
            return
        try:
            self._diagnostics(result)
        except Exception:
            logger.error("session_diagnostics_failed", exc_info=True)

    def _on_storage_event(self, event: StorageEvent) -> None:
        if self._token_key_marker not in event.key:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("storage_event_outside_loop", key=event.key)
            return
        task = loop.create_task(self.check_session_expiry())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # Queries

    async def get_session_data(self) -> Session | None:
        if self._auth_client is None:
            logger.warning("session_monitor_not_initialized")
            return None
        try:
            fetched = await self._auth_client.get_session()
        except Exception:
            diagnostics_log.error("get_session_failed", exc_info=True)
            return None
        if fetched.error:
            diagnostics_log.error("get_session_failed", error=fetched.error)
            return None
        return fetched.session

    async def get_session_status(self) -> SessionStatus:
        session = await self.get_session_data()
        if session is None:
            return SessionStatus.NO_SESSION
        return classify_remaining(session.expires_at - self._clock(), self._warning_seconds)

    async def refresh_session(self) -> bool:
        if self._auth_client is None:
            logger.warning("session_monitor_not_initialized")
            return False
        try:
            result = await self._auth_client.refresh_session()
        except Exception:
            diagnostics_log.error("refresh_session_failed", exc_info=True)
            return False
        if result.error or result.session is None:
            diagnostics_log.error("refresh_session_failed", error=result.error)
            return False
        return True

    # Listeners

    def on_session_warning(self, callback: WarningCallback) -> Callable[[], None]:
        return self._register(self._warning_callbacks, callback)

    def on_session_expiry(self, callback: ExpiryCallback) -> Callable[[], None]:
        return self._register(self._expiry_callbacks, callback)

    @staticmethod
    def _register(registry: list[_Registration], callback: Callable) -> Callable[[], None]:
        registration = _Registration(callback)
        registry.append(registration)

        def unregister() -> None:
            if registration in registry:
                registry.remove(registration)

        return unregister
