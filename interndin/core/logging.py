from __future__ import annotations

import logging
import sys

import structlog

SERVICE_NAME = "interndin-session-api"

# Session checks, provider failures and refresh outcomes are logged here so
# they can be routed or filtered apart from request logs.
DIAGNOSTICS_LOGGER = "interndin.diagnostics"


def setup_logging(
    log_level: str = "INFO", debug: bool = False, service: str = SERVICE_NAME
) -> None:
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    structlog.contextvars.bind_contextvars(service=service)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def get_diagnostics_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Logger for the session diagnostic channel, tagged with the emitting component."""
    return structlog.get_logger(DIAGNOSTICS_LOGGER, component=component)
