"""Tests for shared/config.py."""

import os
from unittest.mock import patch

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.app_name == "GateKeeper API"
        assert settings.port == 5000
        assert settings.environment == "development"
        assert settings.storage_backend == "supabase"
        assert settings.store_timeout_seconds == 8.0
        assert settings.mail_timeout_seconds == 30.0

    def test_policy_defaults(self):
        """OTP, session and cleanup policy defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.otp_expiry_minutes == 10
        assert settings.otp_delivery_retries == 2
        assert settings.otp_retry_base_delay_seconds == 2.0
        assert settings.session_inactivity_minutes == 30
        assert settings.unverified_user_retention_hours == 24
        assert settings.unverified_sweep_cron == "0 */12 * * *"
        assert settings.session_sweep_cron == "0 * * * *"
        assert settings.otp_sweep_cron == "30 * * * *"
        assert "/api/auth/login" in settings.session_exempt_paths
        assert "/api/auth/logout" in settings.session_exempt_paths

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {
            "DEBUG": "true",
            "PORT": "9000",
            "SESSION_INACTIVITY_MINUTES": "5",
            "STORAGE_BACKEND": "memory",
        }):
            settings = Settings()
            assert settings.debug is True
            assert settings.port == 9000
            assert settings.session_inactivity_minutes == 5
            assert settings.storage_backend == "memory"

    def test_environment_flags(self):
        """is_production / is_development follow ENVIRONMENT."""
        assert Settings(environment="production").is_production is True
        assert Settings(environment="Production").is_development is False
        assert Settings(environment="development").is_development is True


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        assert isinstance(get_settings(), Settings)

    def test_get_settings_is_cached(self):
        """get_settings should return the same instance each time."""
        assert get_settings() is get_settings()
