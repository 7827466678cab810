"""
Error handlers for the Lucid Vision API
"""

import structlog
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from core.exceptions import VisionError

logger = structlog.get_logger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    """Handle validation errors with detailed messages"""
    error_messages = []

    for error in exc.errors():
        field = ".".join(str(x) for x in error["loc"][1:])  # Skip 'body'
        msg = error["msg"]

        if field == "answer" and error["type"] == "missing":
            error_messages.append("Answer field is required")
        elif field == "category" and error["type"] == "missing":
            error_messages.append("Category field is required")
        else:
            error_messages.append(f"{field}: {msg}" if field else msg)

    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation Error",
            "detail": error_messages,
            "request_id": _request_id(request),
        },
    )


async def vision_exception_handler(request: Request, exc: VisionError):
    """Map domain errors onto their HTTP status"""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Vision request failed",
        error=exc.error,
        detail=exc.detail,
        vision_id=exc.vision_id,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error,
            "detail": exc.detail,
            "request_id": _request_id(request),
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP Error",
            "detail": exc.detail,
            "status_code": exc.status_code,
            "request_id": _request_id(request),
        },
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error("Unhandled exception",
                 error=str(exc),
                 error_type=type(exc).__name__,
                 path=request.url.path,
                 request_id=_request_id(request))

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "request_id": _request_id(request),
        },
    )
