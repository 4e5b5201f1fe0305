"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
The environment is set before the application is imported so the cached
settings use the in-memory store and a known signing secret.
"""

import os

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("ENABLE_CLEANUP_JOBS", "false")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("REFRESH_SECRET", "test-refresh-secret-for-testing-only")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("OTP_RETRY_BASE_DELAY_SECONDS", "0")

import pytest
from datetime import datetime, timezone, timedelta
import jwt  # PyJWT

import api  # noqa: F401  (imports the app before any route module)
from api.dependencies import ServiceContainer, reset_container, set_container
from shared.config import get_settings


# Test JWT secret (only for testing - matches the environment above)
TEST_JWT_SECRET = os.environ["JWT_SECRET"]


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
    is_verified: bool = True,
    first_name: str = "Test",
    last_name: str = "User",
) -> str:
    """
    Create a test access token.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        is_verified: Value of the isVerified claim

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "firstName": first_name,
        "lastName": last_name,
        "isVerified": is_verified,
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


class FakeClock:
    """Controllable clock for simulating elapsed time."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def reset_service_container():
    """Reset the service container before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(clock: FakeClock) -> ServiceContainer:
    """In-memory container driven by the fake clock, installed for the app."""
    c = ServiceContainer(settings=get_settings(), clock=clock)
    set_container(c)
    return c


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "test@example.com"


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}
