"""
Session module interfaces.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .models import ClientMeta, Session, SessionStats


@runtime_checkable
class ISessionRepository(Protocol):
    """Storage contract for session rows keyed by ``session_id``."""

    async def insert(self, session: Session) -> Session:
        ...

    async def get(self, session_id: str) -> Optional[Session]:
        ...

    async def update_activity(
        self, session_id: str, last_activity: datetime, expires_at: datetime
    ) -> bool:
        ...

    async def delete(self, session_id: str) -> bool:
        ...

    async def delete_for_user(self, user_id: str) -> int:
        ...

    async def list_live_for_user(self, user_id: str, now: datetime) -> list[Session]:
        ...

    async def delete_expired(self, now: datetime) -> int:
        """Delete rows with ``expires_at < now``."""
        ...

    async def list_live(self, now: datetime) -> list[Session]:
        ...


@runtime_checkable
class ISessionStore(Protocol):
    """
    Interface for the session store.

    Sessions slide: every ``touch`` pushes expiry to now plus the window.
    """

    async def create(
        self,
        user_id: str,
        client_meta: Optional[ClientMeta] = None,
        inactivity_window_minutes: Optional[int] = None,
    ) -> str:
        ...

    async def get(self, session_id: str) -> Optional[Session]:
        ...

    async def touch(
        self, session_id: str, inactivity_window_minutes: Optional[int] = None
    ) -> bool:
        ...

    async def delete(self, session_id: str) -> bool:
        ...

    async def delete_all_for_user(self, user_id: str) -> int:
        ...

    async def list_for_user(self, user_id: str) -> list[Session]:
        ...

    async def cleanup_expired(self) -> int:
        ...

    async def stats(self) -> SessionStats:
        ...
