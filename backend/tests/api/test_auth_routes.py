"""
Tests for the auth endpoints.

Runs the full application against the in-memory container; emails go to
the logging transport.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api import app
from api.dependencies import get_app_settings
from modules.sessions.middleware import SESSION_COOKIE, SESSION_HEADER
from shared.config import Settings
from shared.security import create_refresh_token


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(app)


def register(client, email="ada@example.com", password="password1"):
    return client.post("/api/auth/register", json={
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": email,
        "password": password,
    })


def send_otp(client, email="ada@example.com", is_resend=False):
    return client.post(
        "/api/auth/send-registration-otp", json={"email": email, "isResend": is_resend}
    )


def verified_user(client, email="ada@example.com", password="password1") -> dict:
    """Register, verify and return the verify-email payload."""
    register(client, email, password)
    otp = send_otp(client, email).json()["data"]["otp"]
    return client.post("/api/auth/verify-email", json={"email": email, "otp": otp}).json()["data"]


class TestSendRegistrationOtp:

    def test_new_email(self, client):
        """Should issue a code and flag the email as new."""
        response = send_otp(client, "new@example.com")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Verification code sent successfully"
        assert body["code"] == "OTP_SENT"
        assert body["data"]["isNewUser"] is True
        assert len(body["data"]["otp"]) == 6

    def test_resend_message(self, client):
        register(client)

        body = send_otp(client, is_resend=True).json()

        assert body["message"] == "Verification code resent successfully"
        assert body["data"]["isNewUser"] is False

    def test_verified_account(self, client):
        verified_user(client)

        response = send_otp(client)

        assert response.status_code == 400
        assert response.json()["code"] == "ALREADY_VERIFIED"

    def test_invalid_email(self, client):
        response = send_otp(client, "nope@mailinator.com")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Temporary or disposable email addresses are not allowed",
            "code": "INVALID_EMAIL",
        }

    def test_code_hidden_outside_development(self, client):
        app.dependency_overrides[get_app_settings] = lambda: Settings(environment="production")
        try:
            body = send_otp(client, "new@example.com").json()
        finally:
            app.dependency_overrides.clear()

        assert body["data"]["otp"] == "sent"


class TestVerifyEmail:

    def test_verify_returns_tokens(self, client):
        register(client)
        otp = send_otp(client).json()["data"]["otp"]

        response = client.post("/api/auth/verify-email", json={"email": "ada@example.com", "otp": otp})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Email verified successfully"
        assert body["data"]["user"]["isVerified"] is True
        assert body["data"]["redirectTo"] == "/dashboard"
        assert body["data"]["token"]
        assert body["data"]["refreshToken"]
        assert "passwordHash" not in body["data"]["user"]

    def test_code_is_single_use(self, client):
        register(client)
        otp = send_otp(client).json()["data"]["otp"]
        payload = {"email": "ada@example.com", "otp": otp}

        assert client.post("/api/auth/verify-email", json=payload).status_code == 200
        second = client.post("/api/auth/verify-email", json=payload)

        assert second.status_code == 400
        assert second.json()["code"] == "OTP_INVALID"

    def test_expired_code(self, client, clock):
        register(client)
        otp = send_otp(client).json()["data"]["otp"]
        clock.advance(minutes=10)

        response = client.post("/api/auth/verify-email", json={"email": "ada@example.com", "otp": otp})

        assert response.status_code == 400
        assert response.json()["code"] == "OTP_EXPIRED"

    def test_malformed_code(self, client):
        response = client.post("/api/auth/verify-email", json={"email": "ada@example.com", "otp": "12ab"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert response.json()["success"] is False

    def test_code_for_unknown_account(self, client):
        otp = send_otp(client, "ghost@example.com").json()["data"]["otp"]

        response = client.post("/api/auth/verify-email", json={"email": "ghost@example.com", "otp": otp})

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"


class TestResendVerification:

    def test_unknown_user(self, client):
        response = client.post("/api/auth/resend-verification", json={"email": "ghost@example.com"})

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_resend_replaces_code(self, client):
        register(client)
        with patch("modules.otp.service.generate_otp", side_effect=["111111", "222222"]):
            send_otp(client)
            response = client.post(
                "/api/auth/resend-verification", json={"email": "ada@example.com"}
            )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Verification code sent successfully",
            "code": "OTP_SENT",
        }
        stale = client.post("/api/auth/verify-email", json={"email": "ada@example.com", "otp": "111111"})
        assert stale.json()["code"] == "OTP_INVALID"
        fresh = client.post("/api/auth/verify-email", json={"email": "ada@example.com", "otp": "222222"})
        assert fresh.status_code == 200


class TestRegisterAndLogin:

    def test_register(self, client):
        response = register(client)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["data"]["user"]["email"] == "ada@example.com"
        assert body["data"]["user"]["isVerified"] is False

    def test_register_duplicate(self, client):
        register(client)

        response = register(client, email="ADA@example.com")

        assert response.status_code == 400
        assert response.json()["code"] == "USER_EXISTS"

    def test_register_short_password(self, client):
        response = register(client, password="short")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("password", ["x" * 100, "\u00e9" * 37])
    def test_register_overlong_password(self, client, password):
        """bcrypt limits input to 72 bytes, counted after UTF-8 encoding."""
        response = register(client, password=password)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_register_password_at_byte_limit(self, client):
        response = register(client, password="x" * 72)

        assert response.status_code == 200

    def test_login_requires_verification(self, client):
        register(client)

        response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "password1"})

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "Please verify your email before logging in",
            "code": "NEEDS_VERIFICATION",
            "needsVerification": True,
            "email": "ada@example.com",
        }

    def test_login_after_verification(self, client):
        verified_user(client)

        response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "password1"})

        assert response.status_code == 200
        assert response.json()["message"] == "User logged in successfully"

    def test_login_wrong_password(self, client):
        verified_user(client)

        response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_login_unknown_user(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})

        assert response.status_code == 404


class TestRefreshToken:

    def test_refresh(self, client):
        data = verified_user(client)

        response = client.post("/api/auth/refresh-token", json={"refreshToken": data["refreshToken"]})

        assert response.status_code == 200
        assert response.json()["message"] == "Token refreshed successfully"
        assert response.json()["data"]["token"]

    def test_access_token_is_not_a_refresh_token(self, client):
        data = verified_user(client)

        response = client.post("/api/auth/refresh-token", json={"refreshToken": data["token"]})

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_REFRESH_TOKEN"

    def test_deleted_user(self, client):
        token = create_refresh_token(user_id="gone")

        response = client.post("/api/auth/refresh-token", json={"refreshToken": token})

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"


class TestPasswordReset:

    def test_unknown_email(self, client):
        response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 200
        assert response.json()["message"].startswith("If an account with that email exists")

    def test_reset_flow_ends_sessions(self, client, container):
        """A reset sets the password and logs the user out everywhere."""
        data = verified_user(client)
        user_id = data["user"]["id"]
        client.get("/api/users/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert len(container.session_repository) == 1

        with patch("modules.users.service.generate_reset_token", return_value="reset-token"):
            forgot = client.post("/api/auth/forgot-password", json={"email": "ada@example.com"})
        assert forgot.json()["message"].startswith("If an account with that email exists")

        response = client.post("/api/auth/reset-password", json={
            "email": "ada@example.com",
            "token": "reset-token",
            "newPassword": "new-password-1",
        })

        assert response.status_code == 200
        assert response.json()["message"] == (
            "Password reset successful. You can now log in with your new password."
        )
        assert len(container.session_repository) == 0
        login = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "new-password-1"})
        assert login.json()["data"]["user"]["id"] == user_id

    def test_known_and_unknown_emails_get_same_reply(self, client):
        verified_user(client)

        known = client.post("/api/auth/forgot-password", json={"email": "ada@example.com"})
        unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()

    @pytest.mark.parametrize("email", ["not-an-email", "ada@example"])
    def test_forgot_password_malformed_email(self, client, email):
        response = client.post("/api/auth/forgot-password", json={"email": email})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_EMAIL"

    def test_reset_rejects_overlong_password(self, client):
        verified_user(client)

        response = client.post("/api/auth/reset-password", json={
            "email": "ada@example.com",
            "token": "whatever",
            "newPassword": "x" * 100,
        })

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert "72 bytes" in response.json()["message"]

    def test_bad_token(self, client):
        verified_user(client)

        response = client.post("/api/auth/reset-password", json={
            "email": "ada@example.com",
            "token": "wrong",
            "newPassword": "new-password-1",
        })

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_RESET_TOKEN"


class TestLogout:

    def test_logout_deletes_session(self, client, container):
        data = verified_user(client)
        me = client.get("/api/users/me", headers={"Authorization": f"Bearer {data['token']}"})
        session_id = me.headers[SESSION_HEADER]

        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logged out successfully"}
        assert response.headers[SESSION_HEADER] == ""
        assert "max-age=0" in response.headers["set-cookie"].lower()
        assert SESSION_COOKIE in response.headers["set-cookie"]
        assert len(container.session_repository) == 0
        assert session_id

    def test_logout_without_session(self, client):
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
