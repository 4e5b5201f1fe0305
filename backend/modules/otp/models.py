"""
OTP module data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import CamelModel
from modules.users.models import User

OTP_PATTERN = r"^\d{6}$"


class OTPRecord(BaseModel):
    """A stored one-time passcode for an email address."""

    id: str
    email: str
    otp: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class OTPIssueResult(BaseModel):
    """Outcome of issuing a code."""

    otp: str
    is_new_user: bool


class VerificationResult(BaseModel):
    """Outcome of a successful verification."""

    user: User


class SendOTPRequest(CamelModel):
    email: str
    is_resend: bool = False


class VerifyEmailRequest(CamelModel):
    email: str
    otp: str = Field(..., pattern=OTP_PATTERN)


class ResendVerificationRequest(CamelModel):
    email: str


class SendOTPData(CamelModel):
    otp: str
    is_new_user: bool


class SendOTPResponse(CamelModel):
    success: bool = True
    message: str
    data: SendOTPData
    code: Optional[str] = "OTP_SENT"
