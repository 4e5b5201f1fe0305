import pytest
from datetime import datetime, timezone

import jwt

from modules.auth.tokens import as_authenticated, auth_data, issue_tokens
from modules.users.models import User
from shared.config import Settings
from shared.security import decode_access_token, decode_refresh_token


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret="access-secret", refresh_secret="refresh-secret")


@pytest.fixture
def user() -> User:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return User(
        id="user-1",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password_hash="hash",
        is_verified=True,
        created_at=now,
        updated_at=now,
    )


class TestIssueTokens:
    def test_access_token_claims(self, user, settings):
        """Should sign the user's identity into the access token."""
        token, _ = issue_tokens(user, settings)

        claims = decode_access_token(token, settings)
        assert claims["sub"] == "user-1"
        assert claims["email"] == "ada@example.com"
        assert claims["firstName"] == "Ada"
        assert claims["isVerified"] is True

    def test_refresh_token_uses_own_secret(self, user, settings):
        """Should sign the refresh token with the refresh secret only."""
        token, refresh = issue_tokens(user, settings)

        assert decode_refresh_token(refresh, settings)["sub"] == "user-1"
        with pytest.raises(jwt.InvalidTokenError):
            decode_refresh_token(token, settings)
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(refresh, settings)


def test_auth_data_hides_private_fields(user, settings):
    data = auth_data(user, settings)

    dumped = data.model_dump(by_alias=True)
    assert dumped["user"]["email"] == "ada@example.com"
    assert "passwordHash" not in dumped["user"]
    assert dumped["refreshToken"]


def test_as_authenticated(user):
    authenticated = as_authenticated(user)

    assert authenticated.id == "user-1"
    assert authenticated.is_verified is True
