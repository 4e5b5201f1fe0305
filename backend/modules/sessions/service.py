"""
Session store implementation.

Server-side sessions with sliding expiration. A session is valid while
``expires_at > now``; each ``touch`` moves ``expires_at`` to
``now + window``. Expired rows are left in place until ``cleanup_expired``
removes them.
"""

import logging
import uuid
from datetime import timedelta
from typing import Optional

from shared.models import Clock, utc_now

from .interfaces import ISessionRepository, ISessionStore
from .models import ClientMeta, Session, SessionStats

logger = logging.getLogger(__name__)

DEFAULT_INACTIVITY_MINUTES = 30


class SessionStore(ISessionStore):
    """
    Session store on top of a session repository.

    Args:
        repository: Where session rows live.
        clock: Source of "now"; tests pass a controllable clock.
        default_window_minutes: Window used when a call does not pass one.
    """

    def __init__(
        self,
        repository: ISessionRepository,
        clock: Clock = utc_now,
        default_window_minutes: int = DEFAULT_INACTIVITY_MINUTES,
    ):
        self._repo = repository
        self._clock = clock
        self._default_window = default_window_minutes

    @property
    def default_window_minutes(self) -> int:
        return self._default_window

    def _window(self, minutes: Optional[int]) -> timedelta:
        return timedelta(minutes=minutes if minutes is not None else self._default_window)

    async def create(
        self,
        user_id: str,
        client_meta: Optional[ClientMeta] = None,
        inactivity_window_minutes: Optional[int] = None,
    ) -> str:
        """Create a session and return its opaque id."""
        meta = client_meta or ClientMeta()
        now = self._clock()
        session = Session(
            session_id=str(uuid.uuid4()),
            user_id=user_id,
            last_activity=now,
            expires_at=now + self._window(inactivity_window_minutes),
            user_agent=meta.user_agent,
            ip=meta.ip,
            created_at=now,
        )
        # Replace any record already holding this id
        await self._repo.delete(session.session_id)
        await self._repo.insert(session)
        logger.debug("Created session for user %s", user_id)
        return session.session_id

    async def get(self, session_id: str) -> Optional[Session]:
        """Return the session if it is still valid. Does not refresh it."""
        session = await self._repo.get(session_id)
        if session is None or not session.is_valid(self._clock()):
            return None
        return session

    async def touch(
        self, session_id: str, inactivity_window_minutes: Optional[int] = None
    ) -> bool:
        """Record activity; False if the session does not exist."""
        now = self._clock()
        return await self._repo.update_activity(
            session_id, now, now + self._window(inactivity_window_minutes)
        )

    async def delete(self, session_id: str) -> bool:
        return await self._repo.delete(session_id)

    async def delete_all_for_user(self, user_id: str) -> int:
        count = await self._repo.delete_for_user(user_id)
        logger.info("Deleted %d sessions for user %s", count, user_id)
        return count

    async def list_for_user(self, user_id: str) -> list[Session]:
        return await self._repo.list_live_for_user(user_id, self._clock())

    async def cleanup_expired(self) -> int:
        return await self._repo.delete_expired(self._clock())

    async def stats(self) -> SessionStats:
        live = await self._repo.list_live(self._clock())
        return SessionStats(
            total_sessions=len(live),
            active_users=len({s.user_id for s in live}),
        )
