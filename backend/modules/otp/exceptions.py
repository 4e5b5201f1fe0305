"""
OTP module exceptions.
"""

from typing import Optional

from shared.exceptions import ExpiredError, GateKeeperError, ValidationError


class OTPError(GateKeeperError):
    """Base exception for OTP errors."""

    status_code = 400


class AlreadyVerifiedError(ValidationError):
    """Raised when requesting a code for an already verified email."""

    def __init__(self, email: str):
        super().__init__(
            "This email is already verified. Please login instead.",
            code="ALREADY_VERIFIED",
            details={"email": email},
        )


class OTPInvalidError(OTPError):
    """Raised when no stored code matches the email and code."""

    def __init__(self):
        super().__init__(
            "Invalid verification code. Please check and try again.",
            code="OTP_INVALID",
        )


class OTPExpiredError(ExpiredError):
    """Raised when the matching code is past its expiry."""

    def __init__(self):
        super().__init__(
            "Verification code has expired. Please request a new one.",
            code="OTP_EXPIRED",
        )


class OTPServiceError(OTPError):
    """Raised when issuance fails for a reason other than delivery."""

    status_code = 500

    def __init__(
        self,
        message: str = "Error processing verification code. Please try again.",
        cause_code: Optional[str] = None,
    ):
        super().__init__(message, code="OTP_SERVICE_ERROR", details={"cause": cause_code})
