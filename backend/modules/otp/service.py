"""
OTP service implementation.

Issues six digit verification codes, delivers them through the mail
service and verifies them against the store. Codes expire after
``otp_expiry_minutes`` and are single use.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from shared.config import Settings, get_settings
from shared.exceptions import OperationTimeoutError, StoreError
from shared.models import Clock, utc_now
from modules.mail.interfaces import IMailService
from modules.users.exceptions import UserNotFoundError
from modules.users.interfaces import IUserRepository
from modules.users.validation import normalize_email, validate_email

from .exceptions import (
    AlreadyVerifiedError,
    OTPExpiredError,
    OTPInvalidError,
    OTPServiceError,
)
from .interfaces import IOTPRepository, IOTPService
from .models import OTPIssueResult, VerificationResult

logger = logging.getLogger(__name__)


def generate_otp() -> str:
    """Uniformly random code in 100000..999999."""
    return str(secrets.randbelow(900000) + 100000)


class OTPService(IOTPService):
    """
    Verification code issuance and checking.

    Example:
        service = OTPService(otp_repo, user_repo, mail_service)
        result = await service.issue("a@example.com")
        await service.verify("a@example.com", result.otp)
    """

    def __init__(
        self,
        repository: IOTPRepository,
        users: IUserRepository,
        mail: IMailService,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
    ):
        self._repo = repository
        self._users = users
        self._mail = mail
        self._settings = settings or get_settings()
        self._clock = clock

    async def issue(self, email: str, is_resend: bool = False) -> OTPIssueResult:
        """
        Issue (or reuse) a code for the email and send it.

        A live code is reused unless ``is_resend`` is set; a resend always
        replaces prior codes. The stored code is kept when delivery fails.

        Raises:
            InvalidEmailError: Malformed or disposable email.
            AlreadyVerifiedError: Verified account and not a resend.
            EmailSendFailedError: Delivery failed after retries.
            OTPServiceError: The store failed.
        """
        email = validate_email(email)

        try:
            user = await self._users.get_by_email(email)
            if user is not None and user.is_verified and not is_resend:
                raise AlreadyVerifiedError(email)

            now = self._clock()
            live = None if is_resend else await self._repo.get_live(email, now)
            if live is not None:
                code = live.otp
                logger.debug("Reusing live verification code for %s", email)
            else:
                code = generate_otp()
                expires_at = now + timedelta(minutes=self._settings.otp_expiry_minutes)
                await self._repo.replace(email, code, expires_at)
                logger.info("Issued verification code for %s (resend=%s)", email, is_resend)
        except (StoreError, OperationTimeoutError) as e:
            logger.error("OTP store failure for %s: %s", email, e.message)
            raise OTPServiceError(cause_code=e.code) from e

        await self._mail.send_verification_email(email, code)

        if self._settings.is_development:
            logger.debug("Verification code for %s: %s", email, code)

        return OTPIssueResult(otp=code, is_new_user=user is None)

    async def verify(self, email: str, code: str) -> VerificationResult:
        """
        Check a code and mark the user verified.

        Raises:
            OTPInvalidError: No stored code matches.
            OTPExpiredError: The matching code has expired (it is deleted).
            UserNotFoundError: No account for the email.
        """
        email = normalize_email(email)
        record = await self._repo.find(email, code)
        if record is None:
            raise OTPInvalidError()

        if record.is_expired(self._clock()):
            await self._repo.delete(record.id)
            raise OTPExpiredError()

        user = await self._users.get_by_email(email)
        if user is None:
            raise UserNotFoundError()

        user = await self._users.update(user.id, {"is_verified": True}) or user
        await self._repo.delete(record.id)
        logger.info("Verified email for user %s", user.id)
        return VerificationResult(user=user)

    async def resend(self, email: str) -> bool:
        """
        Replace the code for an existing account and send it.

        Raises:
            UserNotFoundError: No account for the email.
        """
        user = await self._users.get_by_email(normalize_email(email))
        if user is None:
            raise UserNotFoundError()
        await self.issue(email, is_resend=True)
        return True

    async def delete_expired(self) -> int:
        return await self._repo.delete_expired(self._clock())
