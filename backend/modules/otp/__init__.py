"""
OTP module.

One-time passcodes for email verification.

Public API:
- IOTPService / IOTPRepository: Interfaces
- OTPService: Issue, verify and resend codes
- SupabaseOTPRepository, InMemoryOTPRepository: Storage
"""

from .interfaces import IOTPRepository, IOTPService
from .models import OTPIssueResult, OTPRecord, VerificationResult
from .repository import InMemoryOTPRepository, SupabaseOTPRepository
from .service import OTPService, generate_otp
from .exceptions import (
    OTPError,
    AlreadyVerifiedError,
    OTPInvalidError,
    OTPExpiredError,
    OTPServiceError,
)

__all__ = [
    "IOTPRepository",
    "IOTPService",
    "OTPIssueResult",
    "OTPRecord",
    "VerificationResult",
    "InMemoryOTPRepository",
    "SupabaseOTPRepository",
    "OTPService",
    "generate_otp",
    "OTPError",
    "AlreadyVerifiedError",
    "OTPInvalidError",
    "OTPExpiredError",
    "OTPServiceError",
]
