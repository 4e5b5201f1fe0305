"""
Mail module exceptions.

Transport errors distinguish a timeout from a semantic rejection because
the delivery retry policy treats them differently: timeouts and connection
failures are retried, a refused recipient is not.
"""

from typing import Optional

from shared.exceptions import DeliveryError, OperationTimeoutError


class MailTransportError(DeliveryError):
    """The mail server could not be reached or failed mid-conversation."""

    def __init__(self, message: str, code: str = "MAIL_TRANSPORT_ERROR"):
        super().__init__(message, service="smtp", code=code)


class MailRejectedError(MailTransportError):
    """The mail server refused the message (undeliverable address)."""

    def __init__(self, recipient: str, reason: Optional[str] = None):
        super().__init__(
            f"Email undeliverable to {recipient}" + (f": {reason}" if reason else ""),
            code="MAIL_REJECTED",
        )
        self.details["recipient"] = recipient


class MailTimeoutError(OperationTimeoutError):
    """The mail transport exceeded its time budget."""

    pass


class EmailSendFailedError(DeliveryError):
    """Delivery failed after the retry policy was exhausted."""

    def __init__(
        self,
        message: str = "Failed to send verification email. Please try again later.",
        reason: str = "error",
        attempts: int = 1,
    ):
        super().__init__(
            message,
            service="smtp",
            code="EMAIL_SEND_FAILED",
            details={"reason": reason, "attempts": attempts},
        )
        self.reason = reason
        self.attempts = attempts
