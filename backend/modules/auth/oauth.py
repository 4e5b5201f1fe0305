"""
OAuth sign-in completion.

Provider redirects and profile fetching happen upstream; this module takes
the fetched profile, reconciles it with the local account, opens a session
and sends the browser to the frontend dashboard with its tokens.
"""

import json
import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse

from shared.config import Settings, get_settings
from shared.exceptions import GateKeeperError
from modules.sessions.interfaces import ISessionStore
from modules.sessions.middleware import create_and_set_session
from modules.users.interfaces import IAccountLinker
from modules.users.models import OAuthProfile, OAuthProvider, User

from .tokens import as_authenticated, issue_tokens

logger = logging.getLogger(__name__)


def dashboard_redirect_url(
    user: User, token: str, refresh_token: str, settings: Settings
) -> str:
    user_data = {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "isVerified": user.is_verified,
        "providerUsername": user.provider_username,
        "provider": user.provider,
        "useProviderUsername": user.use_provider_username,
    }
    query = urlencode({
        "token": token,
        "refreshToken": refresh_token,
        "userData": json.dumps(user_data),
    })
    return f"{settings.frontend_url.rstrip('/')}/dashboard?{query}"


def login_redirect_url(error: str, settings: Settings) -> str:
    return f"{settings.frontend_url.rstrip('/')}/login?{urlencode({'error': error})}"


async def complete_oauth_login(
    request: Request,
    profile: Optional[OAuthProfile],
    provider: OAuthProvider,
    linker: IAccountLinker,
    sessions: ISessionStore,
    settings: Optional[Settings] = None,
) -> RedirectResponse:
    """
    Finish an OAuth sign-in.

    Redirects to the dashboard with tokens on success, or to the login page
    with an ``error`` query parameter when linking fails. A failure to open
    the server-side session is logged; the tokens still work without it.
    """
    settings = settings or get_settings()

    if profile is None:
        return RedirectResponse(
            login_redirect_url(f"Authentication failed with {provider.value}", settings),
            status_code=302,
        )

    try:
        user = await linker.find_or_link_account(profile, provider)
    except GateKeeperError as e:
        logger.warning("OAuth sign-in with %s failed: %s", provider.value, e.message)
        return RedirectResponse(login_redirect_url(e.message, settings), status_code=302)

    token, refresh_token = issue_tokens(user, settings)
    response = RedirectResponse(
        dashboard_redirect_url(user, token, refresh_token, settings),
        status_code=302,
    )

    try:
        await create_and_set_session(
            request, response, as_authenticated(user), sessions, settings, same_site="lax"
        )
    except GateKeeperError as e:
        logger.error("Could not create session after %s sign-in: %s", provider.value, e.message)

    return response
