"""
Tests for the OTP repositories.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from modules.otp.models import OTPRecord
from modules.otp.repository import InMemoryOTPRepository, SupabaseOTPRepository

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def otp_row(**overrides) -> dict:
    row = {
        "id": "otp-1",
        "email": "ada@example.com",
        "otp": "123456",
        "expires_at": (NOW + timedelta(minutes=10)).isoformat(),
        "created_at": NOW.isoformat(),
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def repo(mock_db):
    return SupabaseOTPRepository(mock_db)


class TestSupabaseOTPRepository:

    @pytest.mark.asyncio
    async def test_get_live_filters_and_orders(self, repo, mock_db):
        """Should only ask for unexpired codes, newest first."""
        select = mock_db.table.return_value.select.return_value
        chain = select.eq.return_value.gt.return_value.order.return_value.limit.return_value
        chain.execute.return_value.data = [otp_row()]

        record = await repo.get_live("ada@example.com", NOW)

        assert isinstance(record, OTPRecord)
        assert record.otp == "123456"
        mock_db.table.assert_called_with("otps")
        select.eq.assert_called_with("email", "ada@example.com")
        select.eq.return_value.gt.assert_called_with("expires_at", NOW.isoformat())
        select.eq.return_value.gt.return_value.order.assert_called_with("created_at", desc=True)

    @pytest.mark.asyncio
    async def test_find_missing(self, repo, mock_db):
        select = mock_db.table.return_value.select.return_value
        select.eq.return_value.eq.return_value.limit.return_value.execute.return_value.data = []

        assert await repo.find("ada@example.com", "000000") is None
        select.eq.return_value.eq.assert_called_with("otp", "000000")

    @pytest.mark.asyncio
    async def test_replace_deletes_then_inserts(self, repo, mock_db):
        """Should remove prior codes for the email before inserting."""
        table = mock_db.table.return_value
        table.insert.return_value.execute.return_value.data = [otp_row()]

        record = await repo.replace("ada@example.com", "123456", NOW + timedelta(minutes=10))

        assert record.id == "otp-1"
        table.delete.return_value.eq.assert_called_with("email", "ada@example.com")
        table.delete.return_value.eq.return_value.execute.assert_called_once()
        payload = table.insert.call_args[0][0]
        assert payload == {
            "email": "ada@example.com",
            "otp": "123456",
            "expires_at": (NOW + timedelta(minutes=10)).isoformat(),
        }

    @pytest.mark.asyncio
    async def test_delete_expired_counts(self, repo, mock_db):
        chain = mock_db.table.return_value.delete.return_value.lt.return_value
        chain.execute.return_value.data = [otp_row(), otp_row(id="otp-2")]

        assert await repo.delete_expired(NOW) == 2
        mock_db.table.return_value.delete.return_value.lt.assert_called_with(
            "expires_at", NOW.isoformat()
        )


class TestInMemoryOTPRepository:

    @pytest.mark.asyncio
    async def test_replace_keeps_one_row_per_email(self):
        repo = InMemoryOTPRepository(clock=lambda: NOW)
        await repo.replace("a@example.com", "111111", NOW + timedelta(minutes=10))
        await repo.replace("a@example.com", "222222", NOW + timedelta(minutes=10))
        await repo.replace("b@example.com", "333333", NOW + timedelta(minutes=10))

        assert [r.otp for r in repo.rows_for("a@example.com")] == ["222222"]
        assert await repo.find("a@example.com", "111111") is None
        assert (await repo.find("a@example.com", "222222")).email == "a@example.com"

    @pytest.mark.asyncio
    async def test_get_live_ignores_expired(self):
        repo = InMemoryOTPRepository(clock=lambda: NOW)
        await repo.replace("a@example.com", "111111", NOW + timedelta(minutes=10))

        assert (await repo.get_live("a@example.com", NOW)).otp == "111111"
        assert await repo.get_live("a@example.com", NOW + timedelta(minutes=10)) is None

    @pytest.mark.asyncio
    async def test_delete(self):
        repo = InMemoryOTPRepository(clock=lambda: NOW)
        record = await repo.replace("a@example.com", "111111", NOW + timedelta(minutes=10))

        assert await repo.delete(record.id) is True
        assert await repo.delete(record.id) is False
