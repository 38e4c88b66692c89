from __future__ import annotations

from fastapi import APIRouter, Depends

from interndin.api.deps import get_session_monitor
from interndin.schemas.responses import HealthResponse
from interndin.services.session_monitor import SessionMonitor

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(monitor: SessionMonitor = Depends(get_session_monitor)) -> HealthResponse:
    return HealthResponse(session_monitor_running=monitor.running)
