"""
SMTP email sender adapter - Implements EmailSender protocol.

Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
Delivery failures are logged and swallowed so that a mail outage
never fails a registration. Connections time out after
`timeout` seconds so a hung server cannot hold a worker forever.
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)

ACTIVATION_SUBJECT = "Activate your account"


class SmtpEmailSender:
    """Implements EmailSender protocol over SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        sender: str,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._sender = sender
        self._timeout = timeout

    def send_activation_link(self, email: str, link: str) -> None:
        text_body = f"Follow the link to activate your account: {link}"
        html_body = (
            "<div><h1>Account activation</h1>"
            f'<p>Follow the link to activate your account: <a href="{link}">{link}</a></p></div>'
        )
        message = self._build_message(email, ACTIVATION_SUBJECT, text_body, html_body)

        try:
            self._deliver(email, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send activation email to %s: %s", email, exc)
            return
        logger.info("Activation email sent to %s", email)

    def _build_message(self, to_email: str, subject: str, text_body: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self._sender
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def _deliver(self, to_email: str, msg: MIMEMultipart) -> None:
        context = ssl.create_default_context()
        if self._port == 465:
            with smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout, context=context) as server:
                server.login(self._user, self._password)
                server.sendmail(self._sender, [to_email], msg.as_string())
        else:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                server.ehlo()
                server.starttls(context=context)
                server.login(self._user, self._password)
                server.sendmail(self._sender, [to_email], msg.as_string())
