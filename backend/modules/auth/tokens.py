"""
Token issuance for authenticated users.
"""

from shared.config import Settings
from shared.models import AuthenticatedUser
from shared.security import create_access_token, create_refresh_token
from modules.users.models import User

from .models import AuthData


def access_token_for(user: User, settings: Settings) -> str:
    return create_access_token(
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        is_verified=user.is_verified,
        settings=settings,
    )


def issue_tokens(user: User, settings: Settings) -> tuple[str, str]:
    """Return (access token, refresh token) for the user."""
    return access_token_for(user, settings), create_refresh_token(user_id=user.id, settings=settings)


def auth_data(user: User, settings: Settings) -> AuthData:
    token, refresh_token = issue_tokens(user, settings)
    return AuthData(user=user.to_public(), token=token, refresh_token=refresh_token)


def as_authenticated(user: User) -> AuthenticatedUser:
    return AuthenticatedUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        is_verified=user.is_verified,
    )
