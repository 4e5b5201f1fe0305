"""
User repositories.

SupabaseUserRepository stores users in the ``users`` table.
InMemoryUserRepository keeps them in a dict, for tests and for running
the API locally without a database (STORAGE_BACKEND=memory).
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from supabase import Client

from shared.exceptions import StoreError
from shared.models import Clock, utc_now
from shared.repository import BaseRepository, DEFAULT_STORE_TIMEOUT

from .exceptions import EmailAlreadyRegisteredError
from .models import OAuthProvider, User

USERS_TABLE = "users"

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"


def _serialize(data: dict[str, Any]) -> dict[str, Any]:
    """Convert datetimes to ISO strings for PostgREST."""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in data.items()
    }


class SupabaseUserRepository(BaseRepository[User]):
    """
    Repository for user data access.

    Emails are expected to be normalised (lower case) by the caller.
    """

    def __init__(self, db: Client, timeout: float = DEFAULT_STORE_TIMEOUT) -> None:
        super().__init__(db, timeout)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        query = self._db.table(USERS_TABLE).select("*").eq("id", user_id)
        result = await self._execute(query, "get user by id")
        return self._first(result.data)

    async def get_by_email(self, email: str) -> Optional[User]:
        query = self._db.table(USERS_TABLE).select("*").eq("email", email)
        result = await self._execute(query, "get user by email")
        return self._first(result.data)

    async def get_by_provider_id(
        self, provider: OAuthProvider, provider_id: str
    ) -> Optional[User]:
        query = self._db.table(USERS_TABLE).select("*").eq(provider.id_field, provider_id)
        result = await self._execute(query, f"get user by {provider.id_field}")
        return self._first(result.data)

    async def get_by_reset_token(
        self, email: str, token_hash: str, now: datetime
    ) -> Optional[User]:
        query = (
            self._db.table(USERS_TABLE)
            .select("*")
            .eq("email", email)
            .eq("reset_password_token", token_hash)
            .gt("reset_password_expires", now.isoformat())
        )
        result = await self._execute(query, "get user by reset token")
        return self._first(result.data)

    async def create(self, data: dict[str, Any]) -> User:
        query = self._db.table(USERS_TABLE).insert(_serialize(data))
        try:
            result = await self._execute(query, "create user")
        except StoreError as e:
            if e.db_code == UNIQUE_VIOLATION and "email" in e.message:
                raise EmailAlreadyRegisteredError(data.get("email", "")) from e
            raise
        return User.model_validate(result.data[0])

    async def update(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        payload = _serialize({**changes, "updated_at": utc_now()})
        query = self._db.table(USERS_TABLE).update(payload).eq("id", user_id)
        result = await self._execute(query, "update user")
        return self._first(result.data)

    async def delete_unverified_before(self, cutoff: datetime) -> int:
        query = (
            self._db.table(USERS_TABLE)
            .delete()
            .eq("is_verified", False)
            .lt("created_at", cutoff.isoformat())
        )
        result = await self._execute(query, "delete unverified users")
        return len(result.data or [])

    @staticmethod
    def _first(rows: Optional[list[dict[str, Any]]]) -> Optional[User]:
        if not rows:
            return None
        return User.model_validate(rows[0])


class InMemoryUserRepository:
    """
    User repository with in-memory storage.

    For testing and development. Enforces the same unique-email rule as the
    database constraint.
    """

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._users: dict[str, User] = {}

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.email == email), None)

    async def get_by_provider_id(
        self, provider: OAuthProvider, provider_id: str
    ) -> Optional[User]:
        return next(
            (u for u in self._users.values() if u.provider_id(provider) == provider_id),
            None,
        )

    async def get_by_reset_token(
        self, email: str, token_hash: str, now: datetime
    ) -> Optional[User]:
        for user in self._users.values():
            if (
                user.email == email
                and user.reset_password_token == token_hash
                and user.reset_password_expires is not None
                and user.reset_password_expires > now
            ):
                return user
        return None

    async def create(self, data: dict[str, Any]) -> User:
        email = data.get("email", "")
        if await self.get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)
        now = self._clock()
        user = User(id=str(uuid.uuid4()), created_at=now, updated_at=now, **data)
        self._users[user.id] = user
        return user

    async def update(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        updated = user.model_copy(update={**changes, "updated_at": self._clock()})
        self._users[user_id] = updated
        return updated

    async def delete_unverified_before(self, cutoff: datetime) -> int:
        stale = [
            user_id
            for user_id, user in self._users.items()
            if not user.is_verified and user.created_at < cutoff
        ]
        for user_id in stale:
            del self._users[user_id]
        return len(stale)
