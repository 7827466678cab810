"""
Centralized retry and backoff configuration for provider calls.
"""

import logging
import os

import structlog
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

logger = structlog.get_logger(__name__)


class RetryConfig:
    """Centralized retry configuration loaded from environment."""

    # LLM-specific settings
    LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "2"))
    LLM_BACKOFF_MIN_SEC = float(os.getenv("LLM_BACKOFF_MIN_SEC", "1"))
    LLM_BACKOFF_MAX_SEC = float(os.getenv("LLM_BACKOFF_MAX_SEC", "8"))


def get_llm_retry_decorator(exceptions: tuple = (Exception,)):
    """
    Get standardized retry decorator for LLM operations.
    """
    return retry(
        stop=stop_after_attempt(max(1, RetryConfig.LLM_MAX_RETRIES)),
        wait=wait_exponential(
            multiplier=1,
            min=RetryConfig.LLM_BACKOFF_MIN_SEC,
            max=RetryConfig.LLM_BACKOFF_MAX_SEC,
        ),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
    )
