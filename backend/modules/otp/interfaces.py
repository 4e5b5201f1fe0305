"""
OTP module interfaces.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .models import OTPIssueResult, OTPRecord, VerificationResult


@runtime_checkable
class IOTPRepository(Protocol):
    """Storage contract for OTP rows, keyed by email."""

    async def get_live(self, email: str, now: datetime) -> Optional[OTPRecord]:
        """Newest row for the email with ``expires_at > now``."""
        ...

    async def find(self, email: str, otp: str) -> Optional[OTPRecord]:
        """Row matching email and code, expired or not."""
        ...

    async def replace(self, email: str, otp: str, expires_at: datetime) -> OTPRecord:
        """Delete every row for the email, then insert the new code."""
        ...

    async def delete(self, record_id: str) -> bool:
        ...

    async def delete_expired(self, now: datetime) -> int:
        ...


@runtime_checkable
class IOTPService(Protocol):
    """
    Interface for one-time passcode issuance and verification.
    """

    async def issue(self, email: str, is_resend: bool = False) -> OTPIssueResult:
        ...

    async def verify(self, email: str, code: str) -> VerificationResult:
        ...

    async def resend(self, email: str) -> bool:
        ...

    async def delete_expired(self) -> int:
        ...
