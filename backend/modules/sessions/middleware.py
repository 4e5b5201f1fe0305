"""
Session middleware.

Runs on every non-exempt request:

1. Reads the session id from the ``gatekeeper_session`` cookie, falling
   back to the ``x-session-id`` header.
2. A valid session is touched, attached to ``request.state.session`` and
   its cookie re-issued with a fresh ``max_age``.
3. An unknown or expired id clears the cookie.
4. Without a valid session, an identity resolved from the request (bearer
   token) gets a new session, a cookie and an ``x-session-id`` header.
5. Otherwise the request proceeds without a session.
"""

import logging
from typing import Awaitable, Callable, Iterable, Literal, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from shared.config import Settings, get_settings
from shared.exceptions import GateKeeperError
from shared.models import AuthenticatedUser

from .interfaces import ISessionStore
from .models import ClientMeta

logger = logging.getLogger(__name__)

SESSION_COOKIE = "gatekeeper_session"
SESSION_HEADER = "x-session-id"

SameSite = Literal["strict", "lax", "none"]
IdentityResolver = Callable[[Request], Awaitable[Optional[AuthenticatedUser]]]
StoreProvider = Callable[[], ISessionStore]


def is_exempt(path: str, exempt_paths: Iterable[str]) -> bool:
    """``/`` and every listed path (and anything below it) skip session handling."""
    if path == "/":
        return True
    for exempt in exempt_paths:
        exempt = exempt.rstrip("/")
        if path == exempt or path.startswith(exempt + "/"):
            return True
    return False


def session_id_from_request(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE) or request.headers.get(SESSION_HEADER)


def client_meta_from_request(request: Request) -> ClientMeta:
    return ClientMeta(
        user_agent=request.headers.get("user-agent"),
        ip=request.client.host if request.client else None,
    )


def set_session_cookie(
    response: Response,
    session_id: str,
    window_minutes: int,
    settings: Settings,
    same_site: SameSite = "strict",
) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=window_minutes * 60,
        httponly=True,
        secure=settings.is_production,
        samesite=same_site,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Expire the session cookie and blank the session header."""
    response.delete_cookie(
        SESSION_COOKIE,
        path="/",
        httponly=True,
        secure=settings.is_production,
    )
    response.headers[SESSION_HEADER] = ""


async def create_and_set_session(
    request: Request,
    response: Response,
    user: AuthenticatedUser,
    store: ISessionStore,
    settings: Optional[Settings] = None,
    same_site: SameSite = "strict",
) -> str:
    """
    Create a session for ``user`` and put its id on the response.

    Used by the middleware (strict) and the OAuth callback (lax, since the
    browser arrives there through a cross-site redirect).
    """
    settings = settings or get_settings()
    window = settings.session_inactivity_minutes
    session_id = await store.create(user.id, client_meta_from_request(request), window)
    set_session_cookie(response, session_id, window, settings, same_site)
    response.headers[SESSION_HEADER] = session_id
    logger.info("Established session for user %s", user.id)
    return session_id


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Attaches server-side sessions to requests.

    Args:
        app: The ASGI app.
        store_provider: Returns the session store; called per request so
            a reset service container is picked up.
        identity_resolver: Resolves an already-authenticated user from the
            request, or None.
        settings: Application settings (exempt paths, window, cookie flags).
    """

    def __init__(
        self,
        app: ASGIApp,
        store_provider: StoreProvider,
        identity_resolver: IdentityResolver,
        settings: Optional[Settings] = None,
    ) -> None:
        super().__init__(app)
        self._store_provider = store_provider
        self._resolve_identity = identity_resolver
        self._settings = settings or get_settings()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = self._settings
        if is_exempt(request.url.path, settings.session_exempt_paths):
            return await call_next(request)

        window = settings.session_inactivity_minutes
        request.state.session = None
        refreshed_id: Optional[str] = None
        created_id: Optional[str] = None
        clear_cookie = False

        try:
            store = self._store_provider()
            session_id = session_id_from_request(request)

            if session_id:
                session = await store.get(session_id)
                if session is not None and await store.touch(session_id, window):
                    request.state.session = await store.get(session_id) or session
                    refreshed_id = session_id
                else:
                    logger.debug("Dropping invalid session id from request")
                    clear_cookie = True

            if request.state.session is None:
                user = await self._resolve_identity(request)
                if user is not None:
                    created_id = await store.create(
                        user.id, client_meta_from_request(request), window
                    )
                    request.state.session = await store.get(created_id)
                    logger.info("Established session for user %s", user.id)
        except GateKeeperError as e:
            logger.error("Session middleware failed on %s: %s", request.url.path, e.message)
            return JSONResponse(status_code=e.status_code, content=e.to_dict())

        response = await call_next(request)

        if refreshed_id:
            set_session_cookie(response, refreshed_id, window, settings)
        elif created_id:
            set_session_cookie(response, created_id, window, settings)
            response.headers[SESSION_HEADER] = created_id
        elif clear_cookie:
            clear_session_cookie(response, settings)

        return response
