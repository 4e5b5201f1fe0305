"""
Sessions module.

Server-side sessions with sliding expiration.

Public API:
- ISessionStore / ISessionRepository: Interfaces
- SessionStore: create, get, touch, delete, list, cleanup, stats
- SessionMiddleware: Per-request session handling
- create_and_set_session / clear_session_cookie: Cookie helpers
"""

from .interfaces import ISessionRepository, ISessionStore
from .models import ClientMeta, Session, SessionInfo, SessionStats
from .repository import InMemorySessionRepository, SupabaseSessionRepository
from .service import SessionStore
from .middleware import (
    SESSION_COOKIE,
    SESSION_HEADER,
    SessionMiddleware,
    clear_session_cookie,
    create_and_set_session,
    session_id_from_request,
)

__all__ = [
    "ISessionRepository",
    "ISessionStore",
    "ClientMeta",
    "Session",
    "SessionInfo",
    "SessionStats",
    "InMemorySessionRepository",
    "SupabaseSessionRepository",
    "SessionStore",
    "SESSION_COOKIE",
    "SESSION_HEADER",
    "SessionMiddleware",
    "clear_session_cookie",
    "create_and_set_session",
    "session_id_from_request",
]
