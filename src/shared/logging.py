"""Logging configuration shared by every service process.

Standard library logging owns the handler; structlog renders key-value
events on top of it. Production and staging emit JSON lines, everything else
gets the coloured console renderer. Each process binds its service name so
lines from the API, the workers and the monitor can be told apart.
"""

import logging
import os
import sys
from typing import Any

import structlog

_LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

# Libraries that are chatty at DEBUG and INFO
_QUIET_LOGGERS = ("protean", "httpx", "httpcore", "asyncio", "uvicorn.access")


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def log_level() -> str:
    """LOG_LEVEL wins; otherwise derived from the deployment environment."""
    return os.getenv("LOG_LEVEL", _LEVELS_BY_ENV.get(_environment(), "INFO")).upper()


def _renderer(env: str):
    if env in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )


def configure_logging(service_name: str) -> None:
    """Configure stdlib handlers and structlog processors for one process."""
    level = log_level()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(_environment()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)


def bind_message_context(**kwargs: Any) -> None:
    """Attach the record being handled (topic, partition, offset, group) to log lines."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_message_context() -> None:
    structlog.contextvars.unbind_contextvars("topic", "partition", "offset", "group")
