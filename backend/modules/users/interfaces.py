"""
Users module interfaces.

Other modules should depend on these protocols, not on the concrete
Supabase or in-memory implementations.
"""

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from .models import OAuthProfile, OAuthProvider, User


@runtime_checkable
class IUserRepository(Protocol):
    """Storage contract for user records."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    async def get_by_provider_id(
        self, provider: OAuthProvider, provider_id: str
    ) -> Optional[User]:
        ...

    async def get_by_reset_token(
        self, email: str, token_hash: str, now: datetime
    ) -> Optional[User]:
        """Find the user whose reset token matches and expires after ``now``."""
        ...

    async def create(self, data: dict[str, Any]) -> User:
        """
        Insert a user.

        Raises:
            EmailAlreadyRegisteredError: The email is already taken.
        """
        ...

    async def update(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        """Apply ``changes`` and return the updated user, or None if absent."""
        ...

    async def delete_unverified_before(self, cutoff: datetime) -> int:
        """Delete unverified users created before ``cutoff``; return the count."""
        ...


@runtime_checkable
class IUserService(Protocol):
    """
    Interface for account operations.

    Covers registration, login, profile management and password reset.
    """

    async def register(
        self, first_name: str, last_name: str, email: str, password: str
    ) -> User:
        ...

    async def login(self, email: str, password: str) -> User:
        ...

    async def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    async def mark_verified(self, user_id: str) -> User:
        ...

    async def update_profile(self, user_id: str, changes: dict[str, Any]) -> User:
        ...

    async def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> User:
        ...

    async def request_password_reset(self, email: str) -> str:
        """Start a reset; returns the user-facing message."""
        ...

    async def reset_password(self, email: str, token: str, new_password: str) -> User:
        ...

    async def delete_unverified_before(self, cutoff: datetime) -> int:
        ...


@runtime_checkable
class IAccountLinker(Protocol):
    """Reconciles an OAuth sign-in with the local user table."""

    async def find_or_link_account(
        self, profile: OAuthProfile, provider: OAuthProvider
    ) -> User:
        ...
