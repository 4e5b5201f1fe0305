"""
Users module.

Credential store and account operations.

Public API:
- IUserService / IUserRepository / IAccountLinker: Interfaces
- User, PublicUser, OAuthProfile, OAuthProvider: Models
- User exceptions: UserNotFoundError, EmailAlreadyRegisteredError, etc.
"""

from .interfaces import IUserService, IUserRepository, IAccountLinker
from .models import User, PublicUser, OAuthProfile, OAuthProvider
from .exceptions import (
    UserNotFoundError,
    EmailAlreadyRegisteredError,
    InvalidEmailError,
    InvalidCredentialsError,
    NeedsVerificationError,
    ResetTokenInvalidError,
    MissingProviderEmailError,
)

__all__ = [
    # Interfaces
    "IUserService",
    "IUserRepository",
    "IAccountLinker",
    # Models
    "User",
    "PublicUser",
    "OAuthProfile",
    "OAuthProvider",
    # Exceptions
    "UserNotFoundError",
    "EmailAlreadyRegisteredError",
    "InvalidEmailError",
    "InvalidCredentialsError",
    "NeedsVerificationError",
    "ResetTokenInvalidError",
    "MissingProviderEmailError",
]
