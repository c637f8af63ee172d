"""
SMTP email sender adapter - Implements EmailSender protocol over smtplib.

Connects per message, upgrades with STARTTLS and logs in when
credentials are configured.
"""

import logging
import smtplib
from email.mime.text import MIMEText

from habitsphere.domain.exceptions import NotificationFailed

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol via an SMTP relay.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._timeout = timeout

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Deliver a plain-text message.

        Raises:
            NotificationFailed: On any SMTP or connection error
        """
        message = MIMEText(body, "plain")
        message["From"] = self._sender
        message["To"] = to_address
        message["Subject"] = subject

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                server.starttls()
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP error sending email to %s: %s", to_address, e)
            raise NotificationFailed("Failed to send email") from e

        logger.info("Email sent to %s", to_address)
