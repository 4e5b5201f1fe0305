"""
Mail service.

Renders the verification and password-reset emails and owns the delivery
retry policy for verification codes.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional
from urllib.parse import quote

from shared.config import Settings, get_settings
from shared.exceptions import OperationTimeoutError

from .exceptions import EmailSendFailedError, MailRejectedError, MailTransportError
from .interfaces import IMailService, IMailTransport

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

VERIFICATION_SUBJECT = "Verify Your Email - GateKeeper"
RESET_SUBJECT = "Reset Your Password - GateKeeper"


def render_verification_email(otp: str, expiry_minutes: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #673de6;">Email Verification</h2>
      <p>Thank you for registering with GateKeeper. Your verification code is:</p>
      <div style="background-color: #f4f4f4; padding: 10px; text-align: center; font-size: 24px;
                  font-weight: bold; margin: 20px 0; border-left: 4px solid #673de6;">
        {otp}
      </div>
      <p>This code will expire in {expiry_minutes} minutes.</p>
      <p>If you didn't request this code, please ignore this email.</p>
    </div>
    """


def render_password_reset_email(reset_url: str, expiry_minutes: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #673de6;">Password Reset Request</h2>
      <p>You requested to reset your password. Click the button below to choose a new one:</p>
      <div style="margin: 20px 0; text-align: center;">
        <a href="{reset_url}" style="background-color: #673de6; color: white; padding: 10px 20px;
           text-decoration: none; border-radius: 5px; font-weight: bold;">Reset Password</a>
      </div>
      <p>If you did not request this, please ignore this email.</p>
      <p>This link will expire in {expiry_minutes} minutes.</p>
      <p style="font-size: 12px; color: #666; word-break: break-all;">{reset_url}</p>
    </div>
    """


class MailService(IMailService):
    """
    Application emails on top of a mail transport.

    Verification emails are retried ``retries`` times with exponential
    backoff starting at ``base_delay`` seconds (2s, 4s by default).
    A refused recipient is not retried.
    """

    def __init__(
        self,
        transport: IMailTransport,
        settings: Optional[Settings] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._transport = transport
        self._settings = settings or get_settings()
        self._sleep = sleep

    async def send_verification_email(self, email: str, otp: str) -> None:
        """
        Send an OTP with retries.

        Raises:
            EmailSendFailedError: All attempts failed. ``reason`` is
                "timeout", "rejected" or "error" for the last failure.
        """
        retries = self._settings.otp_delivery_retries
        base_delay = self._settings.otp_retry_base_delay_seconds
        html = render_verification_email(otp, self._settings.otp_expiry_minutes)

        attempt = 0
        while True:
            attempt += 1
            try:
                await self._transport.send(email, VERIFICATION_SUBJECT, html)
                logger.info("Verification email sent to %s on attempt %d", email, attempt)
                return
            except MailRejectedError as e:
                logger.warning("Verification email to %s rejected: %s", email, e.message)
                raise EmailSendFailedError(reason="rejected", attempts=attempt) from e
            except (OperationTimeoutError, MailTransportError) as e:
                reason = "timeout" if isinstance(e, OperationTimeoutError) else "error"
                logger.warning(
                    "Attempt %d to send verification email to %s failed: %s",
                    attempt, email, e.message,
                )
                if attempt > retries:
                    logger.error(
                        "Giving up on verification email to %s after %d attempts", email, attempt
                    )
                    raise EmailSendFailedError(reason=reason, attempts=attempt) from e
                delay = base_delay * (2 ** (attempt - 1))
                logger.info("Retrying verification email in %.1fs", delay)
                await self._sleep(delay)

    async def send_password_reset_email(self, email: str, token: str) -> None:
        """
        Send the reset link (single attempt).

        Raises:
            EmailSendFailedError: Delivery failed.
        """
        base = self._settings.frontend_url.rstrip("/")
        reset_url = f"{base}/reset-password?token={token}&email={quote(email)}"
        html = render_password_reset_email(reset_url, self._settings.reset_token_expire_minutes)
        try:
            await self._transport.send(email, RESET_SUBJECT, html)
        except (OperationTimeoutError, MailTransportError) as e:
            reason = "timeout" if isinstance(e, OperationTimeoutError) else "error"
            logger.error("Failed to send password reset email to %s: %s", email, e.message)
            raise EmailSendFailedError(
                "Unable to send email at this time. Please try again later.",
                reason=reason,
            ) from e
