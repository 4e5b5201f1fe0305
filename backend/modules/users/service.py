"""
User service implementation.

Registration, login, profile management and password reset on top of an
IUserRepository. Password hashing is delegated to passlib (bcrypt).
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from shared.config import Settings, get_settings
from shared.models import Clock, utc_now
from shared.security import (
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)

from .exceptions import (
    InvalidCredentialsError,
    NeedsVerificationError,
    ResetTokenInvalidError,
    UserNotFoundError,
)
from .interfaces import IUserRepository, IUserService
from .models import User
from .validation import normalize_email, validate_email

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = (
    "If an account with that email exists, we have sent password reset instructions."
)

PROFILE_FIELDS = {"first_name", "last_name", "profile_image", "use_provider_username"}


class UserService(IUserService):
    """Account operations backed by a user repository."""

    def __init__(
        self,
        repository: IUserRepository,
        mail: Any = None,  # IMailService - needed for password reset
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
    ):
        self._repo = repository
        self._mail = mail
        self._settings = settings or get_settings()
        self._clock = clock

    async def register(
        self, first_name: str, last_name: str, email: str, password: str
    ) -> User:
        """
        Create an unverified account.

        Raises:
            InvalidEmailError: Malformed or disposable email.
            EmailAlreadyRegisteredError: Email already taken.
        """
        email = validate_email(email)
        user = await self._repo.create({
            "first_name": first_name.strip(),
            "last_name": last_name.strip(),
            "email": email,
            "password_hash": hash_password(password),
            "is_verified": False,
        })
        logger.info("Registered user %s", user.id)
        return user

    async def login(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            UserNotFoundError: No account for the email.
            NeedsVerificationError: Account exists but is unverified.
            InvalidCredentialsError: Wrong password.
        """
        user = await self._repo.get_by_email(normalize_email(email))
        if user is None:
            raise UserNotFoundError("User not found")
        if not user.is_verified:
            raise NeedsVerificationError(user.email)
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return await self._repo.get_by_id(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._repo.get_by_email(normalize_email(email))

    async def mark_verified(self, user_id: str) -> User:
        return await self._update_or_raise(user_id, {"is_verified": True})

    async def update_profile(self, user_id: str, changes: dict[str, Any]) -> User:
        """Apply a partial profile update; unknown and None fields are ignored."""
        allowed = {
            key: value
            for key, value in changes.items()
            if key in PROFILE_FIELDS and value is not None
        }
        if not allowed:
            user = await self._repo.get_by_id(user_id)
            if user is None:
                raise UserNotFoundError("User not found")
            return user
        return await self._update_or_raise(user_id, allowed)

    async def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentialsError()
        return await self._update_or_raise(
            user_id, {"password_hash": hash_password(new_password)}
        )

    async def request_password_reset(self, email: str) -> str:
        """
        Store a hashed reset token and email the raw token.

        Unknown emails get the same message, so callers cannot probe
        which addresses have accounts.

        Raises:
            EmailSendFailedError: The reset email could not be delivered.
        """
        email = normalize_email(email)
        user = await self._repo.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return RESET_REQUESTED_MESSAGE

        token = generate_reset_token()
        expires = self._clock() + timedelta(minutes=self._settings.reset_token_expire_minutes)
        await self._repo.update(user.id, {
            "reset_password_token": hash_reset_token(token),
            "reset_password_expires": expires,
        })

        await self._mail.send_password_reset_email(email, token)
        logger.info("Password reset email sent to user %s", user.id)
        return RESET_REQUESTED_MESSAGE

    async def reset_password(self, email: str, token: str, new_password: str) -> User:
        """
        Set a new password using an emailed reset token.

        A successful reset also verifies the account.

        Raises:
            ResetTokenInvalidError: Token unknown, mismatched or expired.
        """
        user = await self._repo.get_by_reset_token(
            normalize_email(email), hash_reset_token(token), self._clock()
        )
        if user is None:
            raise ResetTokenInvalidError()

        return await self._update_or_raise(user.id, {
            "password_hash": hash_password(new_password),
            "reset_password_token": None,
            "reset_password_expires": None,
            "is_verified": True,
        })

    async def delete_unverified_before(self, cutoff: datetime) -> int:
        return await self._repo.delete_unverified_before(cutoff)

    async def _update_or_raise(self, user_id: str, changes: dict[str, Any]) -> User:
        user = await self._repo.update(user_id, changes)
        if user is None:
            raise UserNotFoundError("User not found")
        return user
