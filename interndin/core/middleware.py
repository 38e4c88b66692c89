from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from interndin.core.exceptions import InternDinBaseError
from interndin.core.logging import get_logger
from interndin.schemas.responses import ErrorResponse

logger = get_logger(__name__)


async def interndin_exception_handler(request: Request, exc: InternDinBaseError) -> JSONResponse:
    """Render service errors as ErrorResponse bodies.

    Auth and session errors (4xx) are expected in normal use and logged at
    warning level; provider outages and internal errors at error level.
    """
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        error_code=exc.error_code,
        status_code=exc.status_code,
        message=exc.message,
        detail=exc.detail,
        method=request.method,
        path=request.url.path,
    )
    body = ErrorResponse(error_code=exc.error_code, message=exc.message, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))
