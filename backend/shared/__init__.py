"""
Shared infrastructure for the GateKeeper backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- repository: Base repository with the store timeout/error policy
- exceptions: Base exception classes and the error taxonomy
- security: Password hashing and JWT helpers

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    GateKeeperError,
    ValidationError,
    NotFoundError,
    ConflictError,
    ExpiredError,
    AuthenticationError,
    AuthorizationError,
    ServerError,
    ExternalServiceError,
    DeliveryError,
    OperationTimeoutError,
    StoreError,
)
from .models import AuthenticatedUser, utc_now

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "GateKeeperError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ExpiredError",
    "AuthenticationError",
    "AuthorizationError",
    "ServerError",
    "ExternalServiceError",
    "DeliveryError",
    "OperationTimeoutError",
    "StoreError",
    "AuthenticatedUser",
    "utc_now",
]
