"""
Common dependencies for the Lucid Vision API
"""

from types import SimpleNamespace
from typing import Any, Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from logging_config import bind_request_context
from services.auth.tokens import decode_token, user_id_from_claims
from services.vision_service import VisionService


# HTTPBearer security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Any:
    """
    Resolve the current authenticated user from the bearer token.

    The token is issued by the auth provider; only its subject is used here.
    """
    token: Optional[str] = None
    if credentials and credentials.credentials:
        token = credentials.credentials

    # Manual inspection of Authorization header
    if not token:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.lower().startswith("bearer "):
            token = auth_header[7:]

    if not token:
        raise HTTPException(
            status_code=401,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = await decode_token(token)
    user_id = user_id_from_claims(payload)
    bind_request_context(user_id=user_id)

    # Lightweight user object; routes only read ``id``
    return SimpleNamespace(
        id=user_id,
        user_id=user_id,
        email=payload.get("email"),
    )


def get_vision_service(request: Request) -> VisionService:
    service = getattr(request.app.state, "vision_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Vision service not initialized")
    return service
