"""
Tests for the user repositories.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from modules.users.exceptions import EmailAlreadyRegisteredError
from modules.users.models import OAuthProvider, User
from modules.users.repository import InMemoryUserRepository, SupabaseUserRepository
from shared.exceptions import StoreError

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def user_row(**overrides) -> dict:
    row = {
        "id": "user-1",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "password_hash": "hash",
        "is_verified": False,
        "created_at": NOW.isoformat(),
        "updated_at": NOW.isoformat(),
    }
    row.update(overrides)
    return row


class PostgrestError(Exception):
    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def repo(mock_db):
    return SupabaseUserRepository(mock_db)


class TestSupabaseUserRepository:

    @pytest.mark.asyncio
    async def test_get_by_email(self, repo, mock_db):
        """Should query by email and map the row."""
        chain = mock_db.table.return_value.select.return_value.eq.return_value
        chain.execute.return_value.data = [user_row()]

        user = await repo.get_by_email("ada@example.com")

        assert isinstance(user, User)
        assert user.first_name == "Ada"
        mock_db.table.assert_called_with("users")
        mock_db.table.return_value.select.return_value.eq.assert_called_with(
            "email", "ada@example.com"
        )

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, repo, mock_db):
        """Should return None when no row matches."""
        chain = mock_db.table.return_value.select.return_value.eq.return_value
        chain.execute.return_value.data = []

        assert await repo.get_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_get_by_provider_id_uses_provider_column(self, repo, mock_db):
        chain = mock_db.table.return_value.select.return_value.eq.return_value
        chain.execute.return_value.data = [user_row(github_id="gh-1")]

        user = await repo.get_by_provider_id(OAuthProvider.GITHUB, "gh-1")

        assert user.github_id == "gh-1"
        mock_db.table.return_value.select.return_value.eq.assert_called_with("github_id", "gh-1")

    @pytest.mark.asyncio
    async def test_create_serializes_datetimes(self, repo, mock_db):
        mock_db.table.return_value.insert.return_value.execute.return_value.data = [user_row()]

        await repo.create({"email": "ada@example.com", "reset_password_expires": NOW})

        payload = mock_db.table.return_value.insert.call_args[0][0]
        assert payload["reset_password_expires"] == NOW.isoformat()

    @pytest.mark.asyncio
    async def test_create_duplicate_email(self, repo, mock_db):
        """A unique violation on email should become EmailAlreadyRegisteredError."""
        mock_db.table.return_value.insert.return_value.execute.side_effect = PostgrestError(
            'duplicate key value violates unique constraint "users_email_key"', "23505"
        )

        with pytest.raises(EmailAlreadyRegisteredError) as exc_info:
            await repo.create({"email": "ada@example.com"})
        assert exc_info.value.code == "USER_EXISTS"

    @pytest.mark.asyncio
    async def test_create_other_store_error(self, repo, mock_db):
        mock_db.table.return_value.insert.return_value.execute.side_effect = PostgrestError(
            "connection reset", "08006"
        )

        with pytest.raises(StoreError):
            await repo.create({"email": "ada@example.com"})

    @pytest.mark.asyncio
    async def test_update_sets_updated_at(self, repo, mock_db):
        chain = mock_db.table.return_value.update.return_value.eq.return_value
        chain.execute.return_value.data = [user_row(is_verified=True)]

        user = await repo.update("user-1", {"is_verified": True})

        assert user.is_verified is True
        payload = mock_db.table.return_value.update.call_args[0][0]
        assert payload["is_verified"] is True
        assert "updated_at" in payload

    @pytest.mark.asyncio
    async def test_delete_unverified_before_counts_rows(self, repo, mock_db):
        chain = mock_db.table.return_value.delete.return_value.eq.return_value.lt.return_value
        chain.execute.return_value.data = [user_row(), user_row(id="user-2")]

        count = await repo.delete_unverified_before(NOW)

        assert count == 2
        mock_db.table.return_value.delete.return_value.eq.assert_called_with("is_verified", False)
        mock_db.table.return_value.delete.return_value.eq.return_value.lt.assert_called_with(
            "created_at", NOW.isoformat()
        )


class TestInMemoryUserRepository:

    @pytest.mark.asyncio
    async def test_create_and_lookup(self):
        repo = InMemoryUserRepository(clock=lambda: NOW)
        user = await repo.create({
            "first_name": "Ada", "email": "ada@example.com", "password_hash": "h",
        })

        assert (await repo.get_by_id(user.id)).email == "ada@example.com"
        assert (await repo.get_by_email("ada@example.com")).id == user.id
        assert user.created_at == NOW

    @pytest.mark.asyncio
    async def test_email_is_unique(self):
        repo = InMemoryUserRepository()
        await repo.create({"first_name": "A", "email": "a@example.com", "password_hash": "h"})

        with pytest.raises(EmailAlreadyRegisteredError):
            await repo.create({"first_name": "B", "email": "a@example.com", "password_hash": "h"})

    @pytest.mark.asyncio
    async def test_update_missing_user(self):
        assert await InMemoryUserRepository().update("nope", {"first_name": "X"}) is None

    @pytest.mark.asyncio
    async def test_get_by_reset_token_respects_expiry(self):
        repo = InMemoryUserRepository(clock=lambda: NOW)
        user = await repo.create({
            "first_name": "A", "email": "a@example.com", "password_hash": "h",
            "reset_password_token": "digest",
            "reset_password_expires": NOW + timedelta(hours=1),
        })

        assert (await repo.get_by_reset_token("a@example.com", "digest", NOW)).id == user.id
        assert await repo.get_by_reset_token("a@example.com", "other", NOW) is None
        assert await repo.get_by_reset_token(
            "a@example.com", "digest", NOW + timedelta(hours=2)
        ) is None

    @pytest.mark.asyncio
    async def test_delete_unverified_before(self):
        times = iter([NOW - timedelta(hours=30), NOW])
        repo = InMemoryUserRepository(clock=lambda: next(times))
        old = await repo.create({"first_name": "Old", "email": "old@example.com", "password_hash": "h"})
        await repo.create({
            "first_name": "New", "email": "new@example.com", "password_hash": "h",
        })

        deleted = await repo.delete_unverified_before(NOW - timedelta(hours=24))

        assert deleted == 1
        assert await repo.get_by_id(old.id) is None
        assert await repo.get_by_email("new@example.com") is not None
