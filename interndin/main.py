from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from interndin.api.deps import get_settings
from interndin.api.router import api_router
from interndin.clients.http_client import close_http_client, create_http_client
from interndin.clients.token_store import TokenStore
from interndin.core.exceptions import InternDinBaseError
from interndin.core.logging import get_logger, setup_logging
from interndin.core.middleware import interndin_exception_handler
from interndin.services.auth_provider import SupabaseAuthClient
from interndin.services.session_monitor import SessionMonitor

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging(log_level=settings.LOG_LEVEL, debug=settings.DEBUG)
    app.state.settings = settings
    app.state.http_client = create_http_client(settings)
    app.state.token_store = TokenStore()
    app.state.auth_client = SupabaseAuthClient(
        client=app.state.http_client,
        settings=settings,
        store=app.state.token_store,
    )

    monitor = SessionMonitor.from_settings(settings)
    monitor.on_session_warning(
        lambda minutes: logger.warning("session_expiring_soon", minutes_remaining=round(minutes, 2))
    )
    monitor.on_session_expiry(lambda: logger.info("session_not_active"))
    await monitor.initialize(app.state.auth_client, store=app.state.token_store)
    app.state.session_monitor = monitor

    yield

    await monitor.destroy()
    await close_http_client(app.state.http_client)


def create_app() -> FastAPI:
    app = FastAPI(
        title="InternDin Session API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(InternDinBaseError, interndin_exception_handler)
    app.include_router(api_router)
    return app


app = create_app()
