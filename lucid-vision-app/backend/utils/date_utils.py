"""
Centralized Date Utilities Module
Timestamps for vision records are always timezone-aware UTC
"""

from datetime import datetime, timezone


def get_current_utc() -> datetime:
    """
    Get current UTC datetime with timezone awareness.
    """
    return datetime.now(timezone.utc)


def get_current_iso() -> str:
    """
    Get current UTC time as ISO format string.
    """
    return get_current_utc().isoformat()
