"""
JWT Authentication dependencies.

Validates GateKeeper access tokens and extracts user information.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from shared.config import get_settings
from shared.exceptions import AuthenticationError
from shared.models import AuthenticatedUser
from shared.security import decode_access_token

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(AuthenticationError):
    """Authentication error rendered with the standard error envelope."""

    def __init__(self, message: str, code: str = "AUTH_ERROR"):
        super().__init__(message, code=code)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an access token.

    Args:
        token: The JWT token string

    Returns:
        Decoded claims

    Raises:
        AuthError: If token is invalid or expired
    """
    settings = get_settings()

    if not settings.jwt_secret:
        raise AuthError("Server authentication not configured", code="AUTH_NOT_CONFIGURED")

    try:
        return decode_access_token(token, settings)
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired", code="TOKEN_EXPIRED")
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid token: {str(e)}", code="INVALID_TOKEN")


def get_user_from_payload(payload: dict[str, Any]) -> AuthenticatedUser:
    """
    Convert JWT claims to AuthenticatedUser model.
    """
    if not payload.get("sub") or not payload.get("email"):
        raise AuthError("Invalid token: missing subject", code="INVALID_TOKEN")

    issued = payload.get("iat")
    return AuthenticatedUser(
        id=payload["sub"],
        email=payload["email"],
        first_name=payload.get("firstName"),
        last_name=payload.get("lastName"),
        is_verified=bool(payload.get("isVerified", False)),
        issued_at=datetime.fromtimestamp(issued, tz=timezone.utc) if issued else None,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None:
        raise AuthError("No token, authorization denied", code="NO_TOKEN")

    payload = decode_token(credentials.credentials)
    return get_user_from_payload(payload)


async def identity_from_request(request: Request) -> Optional[AuthenticatedUser]:
    """
    Resolve the caller from the Authorization header, if any.

    Used by the session middleware, which runs outside FastAPI's
    dependency injection.
    """
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    try:
        return get_user_from_payload(decode_token(token.strip()))
    except AuthError:
        return None
