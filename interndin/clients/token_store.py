from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from interndin.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StorageEvent:
    key: str
    old_value: str | None
    new_value: str | None


StorageListener = Callable[[StorageEvent], None]


class TokenStore:
    """Key/value store for persisted auth state that broadcasts change events.

    Plays the role browser localStorage plays for the web client: the auth
    provider writes the session here and other components subscribe to
    changes of the auth-token key.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._listeners: list[StorageListener] = []

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        old = self._data.get(key)
        self._data[key] = value
        if old != value:
            self._emit(StorageEvent(key=key, old_value=old, new_value=value))

    def remove(self, key: str) -> None:
        old = self._data.pop(key, None)
        if old is not None:
            self._emit(StorageEvent(key=key, old_value=old, new_value=None))

    def clear(self) -> None:
        for key in list(self._data):
            self.remove(key)

    def keys(self) -> list[str]:
        return list(self._data)

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """Register a change listener. Returns an idempotent unsubscribe function."""
        self._listeners.append(listener)
        removed = False

        def unsubscribe() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StorageEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.warning("storage_listener_failed", key=event.key, exc_info=True)
