"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The storage backend is chosen here: STORAGE_BACKEND=supabase uses the
Supabase repositories, STORAGE_BACKEND=memory the in-memory ones.
"""

import logging
from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings
from shared.models import Clock, utc_now

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.mail.interfaces import IMailService
    from modules.otp.interfaces import IOTPRepository, IOTPService
    from modules.sessions.interfaces import ISessionRepository, ISessionStore
    from modules.users.interfaces import IAccountLinker, IUserRepository, IUserService

logger = logging.getLogger(__name__)

MEMORY_BACKEND = "memory"


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self, settings: Optional[Settings] = None, clock: Clock = utc_now) -> None:
        self._settings = settings
        self._clock = clock
        self._user_repository: "IUserRepository | None" = None
        self._otp_repository: "IOTPRepository | None" = None
        self._session_repository: "ISessionRepository | None" = None
        self._user_service: "IUserService | None" = None
        self._otp_service: "IOTPService | None" = None
        self._session_store: "ISessionStore | None" = None
        self._mail_service: "IMailService | None" = None
        self._account_linker: "IAccountLinker | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def uses_memory_store(self) -> bool:
        return self.settings.storage_backend.lower() == MEMORY_BACKEND

    def _supabase(self):
        from shared.database import get_supabase_client
        return get_supabase_client(self.settings)

    @property
    def user_repository(self) -> "IUserRepository":
        """Get the user repository instance."""
        if self._user_repository is None:
            from modules.users.repository import InMemoryUserRepository, SupabaseUserRepository
            if self.uses_memory_store:
                self._user_repository = InMemoryUserRepository(clock=self._clock)
            else:
                self._user_repository = SupabaseUserRepository(
                    self._supabase(), timeout=self.settings.store_timeout_seconds
                )
        return self._user_repository

    @property
    def otp_repository(self) -> "IOTPRepository":
        """Get the OTP repository instance."""
        if self._otp_repository is None:
            from modules.otp.repository import InMemoryOTPRepository, SupabaseOTPRepository
            if self.uses_memory_store:
                self._otp_repository = InMemoryOTPRepository(clock=self._clock)
            else:
                self._otp_repository = SupabaseOTPRepository(
                    self._supabase(), timeout=self.settings.store_timeout_seconds
                )
        return self._otp_repository

    @property
    def session_repository(self) -> "ISessionRepository":
        """Get the session repository instance."""
        if self._session_repository is None:
            from modules.sessions.repository import (
                InMemorySessionRepository,
                SupabaseSessionRepository,
            )
            if self.uses_memory_store:
                self._session_repository = InMemorySessionRepository()
            else:
                self._session_repository = SupabaseSessionRepository(
                    self._supabase(), timeout=self.settings.store_timeout_seconds
                )
        return self._session_repository

    @property
    def mail(self) -> "IMailService":
        """Get the mail service; logs instead of sending when SMTP is unset."""
        if self._mail_service is None:
            from modules.mail.service import MailService
            from modules.mail.transport import LoggingMailTransport, SMTPMailTransport

            settings = self.settings
            if settings.smtp_host:
                transport = SMTPMailTransport(
                    host=settings.smtp_host,
                    port=settings.smtp_port,
                    username=settings.smtp_user,
                    password=settings.smtp_password,
                    from_name=settings.mail_from_name,
                    use_ssl=settings.smtp_use_ssl,
                    timeout=settings.mail_timeout_seconds,
                )
            else:
                logger.warning("SMTP_HOST not set; emails will be logged, not sent")
                transport = LoggingMailTransport()
            self._mail_service = MailService(transport, settings=settings)
        return self._mail_service

    @property
    def users(self) -> "IUserService":
        """Get the user service instance."""
        if self._user_service is None:
            from modules.users.service import UserService
            self._user_service = UserService(
                self.user_repository,
                mail=self.mail,
                settings=self.settings,
                clock=self._clock,
            )
        return self._user_service

    @property
    def otp(self) -> "IOTPService":
        """Get the OTP service instance."""
        if self._otp_service is None:
            from modules.otp.service import OTPService
            self._otp_service = OTPService(
                self.otp_repository,
                self.user_repository,
                self.mail,
                settings=self.settings,
                clock=self._clock,
            )
        return self._otp_service

    @property
    def sessions(self) -> "ISessionStore":
        """Get the session store instance."""
        if self._session_store is None:
            from modules.sessions.service import SessionStore
            self._session_store = SessionStore(
                self.session_repository,
                clock=self._clock,
                default_window_minutes=self.settings.session_inactivity_minutes,
            )
        return self._session_store

    @property
    def account_linker(self) -> "IAccountLinker":
        """Get the OAuth account linker."""
        if self._account_linker is None:
            from modules.users.linking import AccountLinker
            self._account_linker = AccountLinker(self.user_repository)
        return self._account_linker

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._user_repository = None
        self._otp_repository = None
        self._session_repository = None
        self._user_service = None
        self._otp_service = None
        self._session_store = None
        self._mail_service = None
        self._account_linker = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (tests, alternative wiring)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_user_service() -> "IUserService":
    """FastAPI dependency for the user service."""
    return get_container().users


def get_otp_service() -> "IOTPService":
    """FastAPI dependency for the OTP service."""
    return get_container().otp


def get_session_store() -> "ISessionStore":
    """FastAPI dependency for the session store."""
    return get_container().sessions


def get_account_linker() -> "IAccountLinker":
    """FastAPI dependency for the account linker."""
    return get_container().account_linker


def get_app_settings() -> Settings:
    """FastAPI dependency for the container's settings."""
    return get_container().settings
