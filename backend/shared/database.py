"""
Supabase client factory.

GateKeeper is the only writer of the ``users``, ``otps`` and ``sessions``
tables and connects with the service-role key; row level security is not
used for them. The client is created once per process.
"""

import logging
from typing import Optional
from supabase import create_client, Client

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def get_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Return the process-wide Supabase client, creating it on first use.

    Raises:
        RuntimeError: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is unset.
    """
    global _client

    if _client is not None:
        return _client

    settings = settings or get_settings()
    missing = [
        name for name, value in (
            ("SUPABASE_URL", settings.supabase_url),
            ("SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
        )
        if not value
    ]
    if missing:
        raise RuntimeError(
            f"Supabase is not configured (missing {', '.join(missing)}). "
            "Set STORAGE_BACKEND=memory to run without a database."
        )

    _client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    logger.info("Connected Supabase client for %s", settings.supabase_url)
    return _client


def reset_client_cache() -> None:
    """Drop the cached client (tests, configuration changes)."""
    global _client
    _client = None
