"""
Session module data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from shared.models import CamelModel


class ClientMeta(BaseModel):
    """Client details recorded when a session is created."""

    user_agent: Optional[str] = None
    ip: Optional[str] = None


class Session(BaseModel):
    """
    A server-side session.

    ``expires_at`` is always ``last_activity`` plus the inactivity window.
    """

    session_id: str
    user_id: str
    last_activity: datetime
    expires_at: datetime
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    created_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return self.expires_at > now


class SessionStats(CamelModel):
    total_sessions: int
    active_users: int


class SessionInfo(CamelModel):
    """Session as returned to its owner."""

    session_id: str
    last_activity: datetime
    expires_at: datetime
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    created_at: datetime
    current: bool = False
