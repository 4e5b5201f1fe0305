"""
Mail module.

Delivers verification codes and password reset links.

Public API:
- IMailTransport / IMailService: Interfaces
- SMTPMailTransport, LoggingMailTransport: Transports
- MailService: Templates and retry policy
"""

from .interfaces import IMailTransport, IMailService
from .service import MailService
from .transport import SMTPMailTransport, LoggingMailTransport
from .exceptions import (
    MailTransportError,
    MailRejectedError,
    MailTimeoutError,
    EmailSendFailedError,
)

__all__ = [
    "IMailTransport",
    "IMailService",
    "MailService",
    "SMTPMailTransport",
    "LoggingMailTransport",
    "MailTransportError",
    "MailRejectedError",
    "MailTimeoutError",
    "EmailSendFailedError",
]
