"""
Domain exceptions for the vision-building loop.

Each carries the HTTP status the API layer maps it to.
"""

from typing import Optional


class VisionError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500
    error = "Vision Error"

    def __init__(self, detail: str, *, vision_id: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.vision_id = vision_id


class ProviderUnavailableError(VisionError):
    """Question or synthesis provider failed; there is no safe default."""

    status_code = 502
    error = "Provider Unavailable"


class InvalidResponseError(VisionError):
    """Empty answer/question or unknown category. Raised before scoring."""

    status_code = 422
    error = "Invalid Response"


class VisionNotFoundError(VisionError):
    """Unknown vision id, or one owned by another user."""

    status_code = 404
    error = "Not Found"

    def __init__(self, vision_id: str):
        super().__init__("Vision not found", vision_id=vision_id)


class PersistenceError(VisionError):
    status_code = 503
    error = "Persistence Error"


class VisionStateError(VisionError):
    """Operation not allowed in the vision's current lifecycle state."""

    status_code = 409
    error = "Conflict"
