"""
Mail module interfaces.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IMailTransport(Protocol):
    """Sends a single HTML email."""

    async def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Deliver one message.

        Raises:
            MailTimeoutError: The transport exceeded its budget.
            MailRejectedError: The server refused the recipient.
            MailTransportError: Any other delivery failure.
        """
        ...


@runtime_checkable
class IMailService(Protocol):
    """Application emails sent by the auth flows."""

    async def send_verification_email(self, email: str, otp: str) -> None:
        ...

    async def send_password_reset_email(self, email: str, token: str) -> None:
        ...
