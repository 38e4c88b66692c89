from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from interndin.config import Settings
from interndin.services.auth_provider import SupabaseAuthClient
from interndin.services.session_monitor import SessionMonitor


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_auth_client(request: Request) -> SupabaseAuthClient:
    return request.app.state.auth_client


def get_session_monitor(request: Request) -> SessionMonitor:
    return request.app.state.session_monitor
