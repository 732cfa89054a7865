"""Outbound email: message types and the SMTP sender."""

from app.infrastructure.external.email.protocols import OutboundEmail, SmtpConfig
from app.infrastructure.external.email.smtp_sender import (
    SmtpEmailSender,
    build_message,
    smtp_config_from_settings,
)

__all__ = [
    "OutboundEmail",
    "SmtpConfig",
    "SmtpEmailSender",
    "build_message",
    "smtp_config_from_settings",
]
