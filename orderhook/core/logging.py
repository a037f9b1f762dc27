"""Structured logging configuration."""

import logging
import sys
from typing import Any, Optional
import uuid

import structlog

from orderhook.core.config import settings

# Third-party loggers that are chatty at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def setup_logging() -> None:
    """Configure structlog on top of stdlib logging.

    Console output in debug, one JSON object per line otherwise. Values bound
    with ``bind_request_context`` are merged into every event of the request.
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    if not settings.debug:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    if settings.debug:
        exc_processor = structlog.dev.set_exc_info
        renderer = structlog.dev.ConsoleRenderer()
    else:
        exc_processor = structlog.processors.format_exc_info
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            exc_processor,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(request_id: Optional[str] = None, **values: Any) -> str:
    """Start a fresh logging context for one inbound request."""
    request_id = request_id or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **values)
    return request_id


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# Convenience logger for quick access
logger = get_logger("orderhook")
