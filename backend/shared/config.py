"""
Centralized configuration for the GateKeeper backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are grouped by prefix (e.g., OTP_*, SESSION_*, SMTP_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "GateKeeper API"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type", "Authorization", "X-Requested-With", "X-Session-Id"]

    # Frontend URLs (for redirects and email links)
    frontend_url: str = "http://localhost:3000"

    # Storage: "supabase" for production, "memory" for local development
    storage_backend: str = "supabase"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""
    store_timeout_seconds: float = 8.0

    # Tokens
    jwt_secret: str = "gatekeeper_secret_key"
    refresh_secret: str = "gatekeeper_refresh_secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7
    refresh_token_expire_days: int = 30
    reset_token_expire_minutes: int = 60

    # OTP policy
    otp_expiry_minutes: int = 10
    otp_delivery_retries: int = 2
    otp_retry_base_delay_seconds: float = 2.0

    # Session policy
    session_inactivity_minutes: int = 30
    session_exempt_paths: list[str] = [
        "/api/auth/login",
        "/api/auth/register",
        "/api/auth/verify-email",
        "/api/auth/send-registration-otp",
        "/api/auth/resend-verification",
        "/api/auth/forgot-password",
        "/api/auth/reset-password",
        "/api/auth/logout",
        "/api/auth/oauth",
        "/api/health",
        "/api/ready",
    ]

    # Cleanup jobs
    enable_cleanup_jobs: bool = True
    unverified_user_retention_hours: int = 24
    unverified_sweep_cron: str = "0 */12 * * *"
    session_sweep_cron: str = "0 * * * *"
    otp_sweep_cron: str = "30 * * * *"

    # Mail
    smtp_host: str = ""
    smtp_port: int = 465
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_ssl: bool = True
    mail_from_name: str = "GateKeeper"
    mail_timeout_seconds: float = 30.0

    @property
    def is_production(self) -> bool:
        """Whether the service runs in production mode."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Whether the service runs in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
