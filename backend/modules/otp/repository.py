"""
OTP repositories.

Rows are keyed by email; issuing a code replaces every prior row for that
email so at most one live code exists per address.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from supabase import Client

from shared.models import Clock, utc_now
from shared.repository import BaseRepository, DEFAULT_STORE_TIMEOUT

from .models import OTPRecord

OTPS_TABLE = "otps"


class SupabaseOTPRepository(BaseRepository[OTPRecord]):
    """Repository for the ``otps`` table."""

    def __init__(self, db: Client, timeout: float = DEFAULT_STORE_TIMEOUT) -> None:
        super().__init__(db, timeout)

    async def get_live(self, email: str, now: datetime) -> Optional[OTPRecord]:
        query = (
            self._db.table(OTPS_TABLE)
            .select("*")
            .eq("email", email)
            .gt("expires_at", now.isoformat())
            .order("created_at", desc=True)
            .limit(1)
        )
        result = await self._execute(query, "get live otp")
        return self._first(result.data)

    async def find(self, email: str, otp: str) -> Optional[OTPRecord]:
        query = (
            self._db.table(OTPS_TABLE)
            .select("*")
            .eq("email", email)
            .eq("otp", otp)
            .limit(1)
        )
        result = await self._execute(query, "find otp")
        return self._first(result.data)

    async def replace(self, email: str, otp: str, expires_at: datetime) -> OTPRecord:
        delete = self._db.table(OTPS_TABLE).delete().eq("email", email)
        await self._execute(delete, "delete otps for email")

        insert = self._db.table(OTPS_TABLE).insert({
            "email": email,
            "otp": otp,
            "expires_at": expires_at.isoformat(),
        })
        result = await self._execute(insert, "create otp")
        return OTPRecord.model_validate(result.data[0])

    async def delete(self, record_id: str) -> bool:
        query = self._db.table(OTPS_TABLE).delete().eq("id", record_id)
        result = await self._execute(query, "delete otp")
        return bool(result.data)

    async def delete_expired(self, now: datetime) -> int:
        query = self._db.table(OTPS_TABLE).delete().lt("expires_at", now.isoformat())
        result = await self._execute(query, "delete expired otps")
        return len(result.data or [])

    @staticmethod
    def _first(rows: Optional[list[dict[str, Any]]]) -> Optional[OTPRecord]:
        if not rows:
            return None
        return OTPRecord.model_validate(rows[0])


class InMemoryOTPRepository:
    """OTP repository with in-memory storage, for tests and local runs."""

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._records: dict[str, OTPRecord] = {}

    def rows_for(self, email: str) -> list[OTPRecord]:
        return [r for r in self._records.values() if r.email == email]

    async def get_live(self, email: str, now: datetime) -> Optional[OTPRecord]:
        live = [r for r in self.rows_for(email) if r.expires_at > now]
        if not live:
            return None
        return max(live, key=lambda r: r.created_at)

    async def find(self, email: str, otp: str) -> Optional[OTPRecord]:
        return next((r for r in self.rows_for(email) if r.otp == otp), None)

    async def replace(self, email: str, otp: str, expires_at: datetime) -> OTPRecord:
        for record in self.rows_for(email):
            del self._records[record.id]
        record = OTPRecord(
            id=str(uuid.uuid4()),
            email=email,
            otp=otp,
            expires_at=expires_at,
            created_at=self._clock(),
        )
        self._records[record.id] = record
        return record

    async def delete(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None

    async def delete_expired(self, now: datetime) -> int:
        expired = [rid for rid, r in self._records.items() if r.expires_at < now]
        for rid in expired:
            del self._records[rid]
        return len(expired)
