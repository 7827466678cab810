"""
Lightweight error logging helpers shared by services and background tasks.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

import structlog

_logger = structlog.get_logger(__name__)


def _log(level: str, event: str, **fields: Any) -> None:
    log = getattr(_logger, level, _logger.warning)
    log(event, **fields)


def log_exception(context: str, exc: Exception, **fields: Any) -> None:
    """Log an exception with context; never raises."""
    try:
        _log("warning", context, error=str(exc), error_type=type(exc).__name__, **fields)
    except Exception:
        # Avoid secondary failures during error handling
        pass


# --------------------------------------------------------------------------- #
#                            Error classification                             #
# --------------------------------------------------------------------------- #

ERROR_CLASSIFICATIONS: Dict[str, Dict[str, Any]] = {
    "rate_limit": {
        "user_message": "The AI provider is busy right now. Please retry in a moment.",
        "severity": "warning",
    },
    "llm_timeout": {
        "user_message": "Failed to load the next prompt in time. Please retry.",
        "severity": "warning",
    },
}


def identify_error_type(error: Exception) -> str:
    """Heuristic classification of common provider errors.

    Keeps dependencies light and avoids tight coupling to provider classes.
    """
    name = type(error).__name__.lower()
    msg = str(error).lower()
    if "rate" in name and "limit" in name:
        return "rate_limit"
    if "quota" in msg or "429" in msg:
        return "rate_limit"
    if isinstance(error, asyncio.TimeoutError) or "timeout" in name or "timed out" in msg:
        return "llm_timeout"
    return "unknown"


def user_message_for(error: Exception, default: str) -> str:
    """Map a provider error to a user-facing message."""
    info = ERROR_CLASSIFICATIONS.get(identify_error_type(error))
    if info:
        return info["user_message"]
    return default
