from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from interndin.clients.token_store import TokenStore
from interndin.config import Settings
from interndin.main import create_app
from interndin.schemas.session import Session, SessionResult

NOW = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeAuthProvider:
    """In-memory AuthProvider with scriptable results and call counting."""

    def __init__(self, result: SessionResult | None = None) -> None:
        self.result = result or SessionResult(session=None)
        self.refresh_result = SessionResult(error="refresh not scripted")
        self.get_calls = 0
        self.refresh_calls = 0

    async def get_session(self) -> SessionResult:
        self.get_calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    async def refresh_session(self) -> SessionResult:
        self.refresh_calls += 1
        if isinstance(self.refresh_result, Exception):
            raise self.refresh_result
        return self.refresh_result


def make_session(expires_at: float, refresh_token: str | None = "refresh-1") -> Session:
    return Session(
        access_token="access-1",
        refresh_token=refresh_token,
        expires_in=3600,
        expires_at=expires_at,
        user={"id": "user-1", "email": "student@interndin.test", "user_metadata": {"role": "student"}},
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        SUPABASE_URL="https://abcdefgh.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        MAX_RETRIES=0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def store() -> TokenStore:
    return TokenStore()


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session_factory():
    return make_session
