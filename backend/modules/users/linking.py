"""
OAuth account linking.

Reconciles a provider sign-in with the local user table: reuse the account
already linked to the provider id, otherwise link to the account with the
same email, otherwise create a new verified account.

This is a best-effort heuristic kept behind IAccountLinker so it can be
replaced or disabled without touching the session or OTP code.
"""

import logging
from typing import Any, Optional

from shared.security import generate_random_password

from .exceptions import MissingProviderEmailError
from .interfaces import IAccountLinker, IUserRepository
from .models import OAuthProfile, OAuthProvider, User

logger = logging.getLogger(__name__)


def names_from_profile(profile: OAuthProfile, provider: OAuthProvider) -> tuple[str, str]:
    """Best-effort (first, last) name extraction for each provider."""
    if provider == OAuthProvider.GITHUB:
        parts = (profile.display_name or "").split()
        first = parts[0] if parts else (profile.username or provider.value)
        return first, " ".join(parts[1:])

    if profile.given_name:
        return profile.given_name, profile.family_name or ""

    parts = (profile.display_name or "").split()
    if parts:
        return parts[0], " ".join(parts[1:]) or "User"
    return provider.value, "User"


class AccountLinker(IAccountLinker):
    """
    Default account linking strategy.

    ``use_provider_username`` is set to True exactly when the provider
    identity gets attached during this call (new account or first link),
    and left unchanged on later sign-ins.
    """

    def __init__(self, repository: IUserRepository):
        self._repo = repository

    async def find_or_link_account(
        self, profile: OAuthProfile, provider: OAuthProvider
    ) -> User:
        email = profile.primary_email
        if not email:
            raise MissingProviderEmailError(provider.value)

        user = await self._repo.get_by_provider_id(provider, profile.id)
        if user is not None:
            return await self._merge_from_email_account(user, email)

        user = await self._repo.get_by_email(email)
        if user is not None:
            return await self._link(user, profile, provider)

        return await self._create(profile, provider, email)

    async def _link(
        self, user: User, profile: OAuthProfile, provider: OAuthProvider
    ) -> User:
        logger.info("Linking %s account to existing user %s", provider.value, user.id)
        changes: dict[str, Any] = {
            provider.id_field: profile.id,
            "is_verified": True,
            "provider": provider.value,
            "provider_username": profile.username or profile.display_name,
            "use_provider_username": True,
        }
        if not user.profile_image and profile.photo:
            changes["profile_image"] = profile.photo
        updated = await self._repo.update(user.id, changes)
        return updated or user

    async def _create(
        self, profile: OAuthProfile, provider: OAuthProvider, email: str
    ) -> User:
        first_name, last_name = names_from_profile(profile, provider)
        user = await self._repo.create({
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password_hash": generate_random_password(),
            "is_verified": True,
            provider.id_field: profile.id,
            "profile_image": profile.photo,
            "provider": provider.value,
            "provider_username": profile.username or profile.display_name,
            "use_provider_username": True,
        })
        logger.info("Created user %s from %s profile", user.id, provider.value)
        return user

    async def _merge_from_email_account(self, user: User, email: str) -> User:
        """Copy the profile image from another account sharing the provider email."""
        if user.profile_image:
            return user
        other: Optional[User] = await self._repo.get_by_email(email)
        if other is None or other.id == user.id or not other.profile_image:
            return user
        logger.info("Copying profile image from user %s to user %s", other.id, user.id)
        updated = await self._repo.update(user.id, {"profile_image": other.profile_image})
        return updated or user
