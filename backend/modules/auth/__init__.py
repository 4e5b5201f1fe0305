"""
Auth module.

HTTP surface for registration, verification, login, token refresh,
password reset, logout and OAuth sign-in completion. The router lives in
``modules.auth.routes`` and is mounted at /api/auth by the app factory.

Public API:
- complete_oauth_login: Finish an OAuth sign-in with a session and redirect
- issue_tokens / auth_data: Access/refresh tokens for a user
"""

from .oauth import complete_oauth_login
from .tokens import auth_data, issue_tokens

__all__ = [
    "complete_oauth_login",
    "auth_data",
    "issue_tokens",
]
