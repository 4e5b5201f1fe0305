"""
Password hashing and token helpers.

Passwords are hashed with bcrypt through passlib. Access and refresh
tokens are HS256 JWTs (PyJWT) signed with separate secrets. Password reset
tokens are random hex strings; only their SHA-256 digest is stored.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext

from .config import Settings, get_settings
from .exceptions import ValidationError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only reads the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72

REFRESH_TOKEN_TYPE = "refresh"


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > PASSWORD_MAX_BYTES


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Raises:
        ValidationError: PASSWORD_TOO_LONG when over PASSWORD_MAX_BYTES.
    """
    if password_too_long(password):
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_BYTES} bytes",
            code="PASSWORD_TOO_LONG",
        )
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def generate_random_password() -> str:
    """Hashed random password for accounts created through OAuth."""
    return hash_password(secrets.token_urlsafe(16))


def create_access_token(
    *,
    user_id: str,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    is_verified: bool = False,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "firstName": first_name,
        "lastName": last_name,
        "isVerified": is_verified,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.access_token_expire_days)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_refresh_token(*, user_id: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "type": REFRESH_TOKEN_TYPE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.refresh_token_expire_days)).timestamp()),
    }
    return jwt.encode(payload, settings.refresh_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        jwt.ExpiredSignatureError: Token is past its expiry.
        jwt.InvalidTokenError: Token is malformed or badly signed.
    """
    settings = settings or get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def decode_refresh_token(token: str, settings: Optional[Settings] = None) -> dict[str, Any]:
    """Decode and verify a refresh token (same errors as decode_access_token)."""
    settings = settings or get_settings()
    payload = jwt.decode(token, settings.refresh_secret, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not a refresh token")
    return payload


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
