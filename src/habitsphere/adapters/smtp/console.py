"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging messages instead of delivering them.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development - verification codes show up in the server log.
    """

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Log the message at INFO level (simulates email delivery).

        Args:
            to_address: Recipient email address
            subject: Message subject
            body: Plain-text message body
        """
        logger.info("[EMAIL] To: %s Subject: %s Body: %s", to_address, subject, body)
