"""Email adapters - Activation link delivery."""

from .console import ConsoleEmailSender
from .mailer import SmtpEmailSender

__all__ = ["ConsoleEmailSender", "SmtpEmailSender"]
