"""Structured logging for the Lucid Vision backend.

Importing this module configures *structlog* once, with a JSON renderer by
default and the stdlib bridge so uvicorn and the OpenAI SDK log in the same
format. Request, user and vision identifiers are carried in contextvars so
every line written while handling one vision-building request can be joined
up afterwards.

Other modules call ``structlog.get_logger(__name__)`` directly.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

import structlog

__all__ = [
    "configure_logging",
    "bind_request_context",
    "clear_request_context",
    "get_logger",
]

# Chatty third-party loggers capped at WARNING unless LOG_LEVEL=DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "uvicorn.access")

_TRUTHY = {"1", "true", "yes"}


def _renderer():
    if os.getenv("LOG_PRETTY", "0").lower() in _TRUTHY:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def _event_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _stdlib_handler(renderer) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
            ],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )
    return handler


def configure_logging(force: bool = False) -> None:
    """Configure structlog and the root stdlib logger.

    Repeated calls are no-ops unless ``force`` is set.
    """
    if getattr(structlog, "_lucid_configured", False) and not force:  # type: ignore[attr-defined]
        return

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    renderer = _renderer()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(_stdlib_handler(renderer))
    root.setLevel(level)

    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=_event_processors() + [renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    setattr(structlog, "_lucid_configured", True)  # type: ignore[attr-defined]


def bind_request_context(
    request_id: Optional[str] = None,
    vision_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    """Attach identifiers to every subsequent log line in this context.

    Only the identifiers passed are updated.
    """
    ids: Dict[str, str] = {
        key: value
        for key, value in (("request_id", request_id), ("vision_id", vision_id), ("user_id", user_id))
        if value
    }
    if not ids:
        return
    try:
        structlog.contextvars.bind_contextvars(**ids)
    except (TypeError, ValueError) as e:
        # Context binding must never break a request
        logging.getLogger(__name__).debug("Failed to bind log context: %s", e)


def clear_request_context() -> None:
    """Drop identifiers left over from a previous request on this context."""
    structlog.contextvars.clear_contextvars()


def get_logger(name: Optional[str] = None):
    """Return a structlog logger, configuring logging first if needed."""
    configure_logging()
    return structlog.get_logger(name) if name else structlog.get_logger()


configure_logging()
