"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging activation links for development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Used whenever no SMTP host is configured.
    """

    def send_activation_link(self, email: str, link: str) -> None:
        """
        Log the activation link (simulates email delivery).

        Args:
            email: Recipient email address (normalized by domain layer)
            link: Absolute activation URL
        """
        logger.info("[ACTIVATION] Email: %s Link: %s", email, link)
