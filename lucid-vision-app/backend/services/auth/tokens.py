"""
JWT token utilities for authentication

Access tokens are issued by the auth provider (Supabase-style HS256 with the
user id in ``sub``); this service only validates them.
"""

import secrets
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import structlog
from fastapi import HTTPException, status

from core.config import ALGORITHM, JWT_AUDIENCE, get_jwt_secret
from utils.async_utils import run_in_thread

logger = structlog.get_logger(__name__)

ACCESS_TOKEN_EXPIRE_MINUTES = 60


def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token (local development and tests)"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    # Encode temporal claims as integer epoch seconds for robust decoding
    to_encode.update(
        {
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }
    )
    if JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = JWT_AUDIENCE

    return jwt.encode(to_encode, get_jwt_secret(), algorithm=ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token"""
    options = {"verify_aud": bool(JWT_AUDIENCE)}
    try:
        return await run_in_thread(
            jwt.decode,
            token,
            get_jwt_secret(),
            algorithms=[ALGORITHM],
            audience=JWT_AUDIENCE,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.PyJWTError as e:
        logger.warning("JWT validation error", error=str(e))
        raise _unauthorized("Could not validate credentials")


def user_id_from_claims(payload: Dict[str, Any]) -> str:
    """Return the opaque user id carried by the token."""
    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        raise _unauthorized("Token is missing a subject")
    return str(user_id)
