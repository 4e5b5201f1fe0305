"""
Auth module response models.

Every endpoint answers with ``{success, message, data?, code?}`` in camelCase.
"""

from typing import Optional

from shared.models import CamelModel
from modules.users.models import PublicUser


class MessageResponse(CamelModel):
    """Success envelope without a payload."""

    success: bool = True
    message: str
    code: Optional[str] = None


class AuthData(CamelModel):
    user: PublicUser
    token: str
    refresh_token: str


class AuthResponse(MessageResponse):
    data: AuthData


class VerifyEmailData(AuthData):
    redirect_to: str = "/dashboard"


class VerifyEmailResponse(MessageResponse):
    data: VerifyEmailData


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class TokenData(CamelModel):
    token: str


class RefreshTokenResponse(MessageResponse):
    data: TokenData
