"""
Mail transports.

SMTPMailTransport delivers through an SMTP server with the standard
library client, run in a worker thread under a time budget.
LoggingMailTransport only logs; it is used when no SMTP host is configured.
"""

import asyncio
import logging
import smtplib
from collections import deque
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from shared.exceptions import OperationTimeoutError
from shared.timeouts import with_timeout

from .exceptions import MailRejectedError, MailTimeoutError, MailTransportError
from .interfaces import IMailTransport

logger = logging.getLogger(__name__)


def build_message(sender: str, to: str, subject: str, html_body: str) -> MIMEMultipart:
    msg = MIMEMultipart()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.attach(MIMEText(html_body, "html"))
    return msg


class SMTPMailTransport(IMailTransport):
    """
    SMTP delivery.

    Uses implicit TLS (SMTP_SSL) when ``use_ssl`` is set, otherwise a plain
    connection upgraded with STARTTLS.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_name: str = "GateKeeper",
        use_ssl: bool = True,
        timeout: float = 30.0,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = f'"{from_name}" <{username}>'
        self._use_ssl = use_ssl
        self._timeout = timeout

    async def send(self, to: str, subject: str, html_body: str) -> None:
        msg = build_message(self._sender, to, subject, html_body)
        try:
            await with_timeout(
                asyncio.to_thread(self._send_sync, msg),
                self._timeout,
                f"send email to {to}",
            )
        except OperationTimeoutError as e:
            raise MailTimeoutError(e.operation, e.timeout) from e

    def _send_sync(self, msg: MIMEMultipart) -> None:
        smtp_class = smtplib.SMTP_SSL if self._use_ssl else smtplib.SMTP
        try:
            with smtp_class(self._host, self._port, timeout=self._timeout) as server:
                if not self._use_ssl:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(msg)
        except smtplib.SMTPRecipientsRefused as e:
            raise MailRejectedError(msg["To"], str(e.recipients)) from e
        except TimeoutError as e:
            raise MailTimeoutError(f"send email to {msg['To']}", self._timeout) from e
        except (smtplib.SMTPException, OSError) as e:
            raise MailTransportError(f"SMTP delivery failed: {e}") from e


class LoggingMailTransport(IMailTransport):
    """
    Logs outgoing mail instead of sending it (local development).

    The most recent ``history`` messages are kept in ``sent``.
    """

    def __init__(self, history: int = 50):
        self.sent: deque[tuple[str, str, str]] = deque(maxlen=history)

    async def send(self, to: str, subject: str, html_body: str) -> None:
        self.sent.append((to, subject, html_body))
        logger.warning("SMTP not configured; email to %s not sent (subject: %s)", to, subject)
        logger.debug("Email body for %s:\n%s", to, html_body)
