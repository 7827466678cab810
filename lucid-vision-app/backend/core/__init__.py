"""
Core package for the Lucid Vision API.

Re-exports configuration helpers, domain exceptions and error handlers so
other parts of the application can import them from `core` without knowing
the internal module layout.
"""

# Avoid importing create_app or dependencies here; both pull in the service
# layer, which itself imports from core.
# from core.app import create_app

from core.config import (
    # Environment / host helpers
    TRUSTED_ORIGINS,
    get_environment,
    get_allowed_hosts,
    get_cors_origins,
    is_production,

    # Auth
    ALGORITHM,
    JWT_AUDIENCE,
    get_jwt_secret,

    # Provider & storage defaults
    LLM_MODEL,
    LLM_TIMEOUT_SECONDS,
    VISION_TTL_SECONDS,
    VISION_LIST_LIMIT,
)

from core.exceptions import (
    VisionError,
    ProviderUnavailableError,
    InvalidResponseError,
    VisionNotFoundError,
    PersistenceError,
    VisionStateError,
)

from core.error_handlers import (
    validation_exception_handler,
    vision_exception_handler,
    http_exception_handler,
    general_exception_handler,
)

__all__ = [
    # Environment / host helpers
    "TRUSTED_ORIGINS",
    "get_environment",
    "get_allowed_hosts",
    "get_cors_origins",
    "is_production",

    # Auth
    "ALGORITHM",
    "JWT_AUDIENCE",
    "get_jwt_secret",

    # Provider & storage defaults
    "LLM_MODEL",
    "LLM_TIMEOUT_SECONDS",
    "VISION_TTL_SECONDS",
    "VISION_LIST_LIMIT",

    # Exceptions
    "VisionError",
    "ProviderUnavailableError",
    "InvalidResponseError",
    "VisionNotFoundError",
    "PersistenceError",
    "VisionStateError",

    # Error handlers
    "validation_exception_handler",
    "vision_exception_handler",
    "http_exception_handler",
    "general_exception_handler",
]
