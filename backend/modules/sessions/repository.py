"""
Session repositories.

SupabaseSessionRepository stores sessions in the ``sessions`` table
(``user_id`` references ``users`` with ON DELETE CASCADE).
InMemorySessionRepository keeps them in a dict.
"""

from datetime import datetime
from typing import Any, Optional

from supabase import Client

from shared.repository import BaseRepository, DEFAULT_STORE_TIMEOUT

from .models import Session

SESSIONS_TABLE = "sessions"


def _to_row(session: Session) -> dict[str, Any]:
    return session.model_dump(mode="json")


class SupabaseSessionRepository(BaseRepository[Session]):
    """Repository for session data access."""

    def __init__(self, db: Client, timeout: float = DEFAULT_STORE_TIMEOUT) -> None:
        super().__init__(db, timeout)

    async def insert(self, session: Session) -> Session:
        query = self._db.table(SESSIONS_TABLE).insert(_to_row(session))
        result = await self._execute(query, "create session")
        return Session.model_validate(result.data[0])

    async def get(self, session_id: str) -> Optional[Session]:
        query = self._db.table(SESSIONS_TABLE).select("*").eq("session_id", session_id)
        result = await self._execute(query, "get session")
        if not result.data:
            return None
        return Session.model_validate(result.data[0])

    async def update_activity(
        self, session_id: str, last_activity: datetime, expires_at: datetime
    ) -> bool:
        query = (
            self._db.table(SESSIONS_TABLE)
            .update({
                "last_activity": last_activity.isoformat(),
                "expires_at": expires_at.isoformat(),
            })
            .eq("session_id", session_id)
        )
        result = await self._execute(query, "touch session")
        return bool(result.data)

    async def delete(self, session_id: str) -> bool:
        query = self._db.table(SESSIONS_TABLE).delete().eq("session_id", session_id)
        result = await self._execute(query, "delete session")
        return bool(result.data)

    async def delete_for_user(self, user_id: str) -> int:
        query = self._db.table(SESSIONS_TABLE).delete().eq("user_id", user_id)
        result = await self._execute(query, "delete user sessions")
        return len(result.data or [])

    async def list_live_for_user(self, user_id: str, now: datetime) -> list[Session]:
        query = (
            self._db.table(SESSIONS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .gt("expires_at", now.isoformat())
            .order("last_activity", desc=True)
        )
        result = await self._execute(query, "list user sessions")
        return [Session.model_validate(row) for row in result.data or []]

    async def delete_expired(self, now: datetime) -> int:
        query = self._db.table(SESSIONS_TABLE).delete().lt("expires_at", now.isoformat())
        result = await self._execute(query, "delete expired sessions")
        return len(result.data or [])

    async def list_live(self, now: datetime) -> list[Session]:
        query = (
            self._db.table(SESSIONS_TABLE)
            .select("session_id, user_id, last_activity, expires_at, created_at")
            .gt("expires_at", now.isoformat())
        )
        result = await self._execute(query, "list live sessions")
        return [Session.model_validate(row) for row in result.data or []]


class InMemorySessionRepository:
    """Session repository with in-memory storage, for tests and local runs."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def insert(self, session: Session) -> Session:
        self._sessions[session.session_id] = session
        return session

    async def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    async def update_activity(
        self, session_id: str, last_activity: datetime, expires_at: datetime
    ) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        self._sessions[session_id] = session.model_copy(
            update={"last_activity": last_activity, "expires_at": expires_at}
        )
        return True

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def delete_for_user(self, user_id: str) -> int:
        owned = [sid for sid, s in self._sessions.items() if s.user_id == user_id]
        for sid in owned:
            del self._sessions[sid]
        return len(owned)

    async def list_live_for_user(self, user_id: str, now: datetime) -> list[Session]:
        live = [
            s for s in self._sessions.values()
            if s.user_id == user_id and s.expires_at > now
        ]
        return sorted(live, key=lambda s: s.last_activity, reverse=True)

    async def delete_expired(self, now: datetime) -> int:
        expired = [sid for sid, s in self._sessions.items() if s.expires_at < now]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    async def list_live(self, now: datetime) -> list[Session]:
        return [s for s in self._sessions.values() if s.expires_at > now]
