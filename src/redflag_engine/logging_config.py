"""
Structured logging for the red-flag engine.

structlog renders one JSON object per event (console output when
``LOG_JSON=false``). Request-scoped fields such as ``request_id`` are carried
through contextvars, so every event logged while handling a request includes
them without passing loggers around.
"""

import logging
from typing import Any, Optional, TextIO

import structlog

from .config import settings


def setup_logging(log_level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure structlog processors, level filtering and output.

    Args:
        log_level: Level name overriding settings.log_level
        stream: Output stream (default: stdout). The CLI passes stderr so that
            stdout carries only the briefing JSON.
    """
    renderer = structlog.processors.JSONRenderer() if settings.log_json else structlog.dev.ConsoleRenderer()
    level = logging.getLevelName((log_level or settings.log_level).upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        # Uncached: the CLI reconfigures to stderr after the API module has logged to stdout
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for a module, usually called with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """
    Attach fields to every event logged from the current context.

    Example:
        >>> bind_context(request_id="abc123")
        >>> logger.info("score_request_received")  # includes request_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all context-bound fields."""
    structlog.contextvars.clear_contextvars()
