"""
Users module exceptions.

These exceptions are raised by the users module and caught by the API
error handlers to return the standard error envelope.
"""

from typing import Any

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)


class UserNotFoundError(NotFoundError):
    """Raised when no user exists for an id or email."""

    def __init__(self, message: str = "User not found with this email. Please register first."):
        super().__init__(message, code="USER_NOT_FOUND")


class EmailAlreadyRegisteredError(ValidationError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            "User already exists with this email",
            code="USER_EXISTS",
            details={"email": email},
        )


class InvalidEmailError(ValidationError):
    """Raised when an email fails format or disposable-domain checks."""

    def __init__(self, message: str = "Please provide a valid email address"):
        super().__init__(message, code="INVALID_EMAIL")


class InvalidCredentialsError(AuthenticationError):
    """Raised when the password does not match."""

    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class NeedsVerificationError(AuthorizationError):
    """Raised when an unverified user tries to log in."""

    def __init__(self, email: str):
        super().__init__(
            "Please verify your email before logging in",
            code="NEEDS_VERIFICATION",
            details={"email": email},
        )
        self.email = email

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["needsVerification"] = True
        body["email"] = self.email
        return body


class ResetTokenInvalidError(ExpiredError):
    """Raised when a password reset token is unknown or expired."""

    def __init__(self):
        super().__init__("Invalid or expired reset token", code="INVALID_RESET_TOKEN")


class MissingProviderEmailError(ValidationError):
    """Raised when an OAuth profile carries no email address."""

    def __init__(self, provider: str):
        super().__init__(
            f"No email found from {provider}",
            code="OAUTH_EMAIL_MISSING",
            details={"provider": provider},
        )
