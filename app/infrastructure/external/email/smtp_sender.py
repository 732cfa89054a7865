"""SMTP email sender (aiosmtplib).

Port 465 uses implicit TLS; any other port upgrades with STARTTLS when
smtp_use_tls is set. Every delivery is bounded by the external timeout.
"""

import logging
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

import aiosmtplib

from app.core.config import Settings, get_settings
from app.core.resilience import ResilienceConfig
from app.infrastructure.exceptions import EmailDeliveryError
from app.infrastructure.external.email.protocols import OutboundEmail, SmtpConfig

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


def smtp_config_from_settings(
    settings: Settings | None = None,
    resilience: ResilienceConfig | None = None,
) -> SmtpConfig:
    """Build SmtpConfig from application settings."""
    settings = settings or get_settings()
    resilience = resilience or ResilienceConfig.from_settings(settings)
    return SmtpConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
        use_tls=settings.smtp_use_tls,
        from_address=settings.email_from,
        from_name=settings.email_from_name,
        timeout=resilience.external_timeout,
    )


def build_message(config: SmtpConfig, outbound: OutboundEmail) -> EmailMessage:
    """Compose a MIME message with the configured From header."""
    msg = EmailMessage()
    msg["From"] = formataddr((config.from_name, config.from_address))
    msg["To"] = outbound.to_email
    msg["Subject"] = outbound.subject
    msg["Message-ID"] = make_msgid()
    msg.set_content(outbound.body, subtype="html" if outbound.html else "plain", charset="utf-8")
    return msg


class SmtpEmailSender:
    """IEmailSender over SMTP. One connection per message."""

    def __init__(self, config: SmtpConfig | None = None) -> None:
        self.config = config or smtp_config_from_settings()

    async def send(
        self,
        to_email: str,
        subject: str,
        body: str,
        *,
        html: bool = False,
    ) -> None:
        config = self.config
        msg = build_message(config, OutboundEmail(to_email, subject, body, html))
        implicit_tls = config.port == IMPLICIT_TLS_PORT
        smtp = aiosmtplib.SMTP(
            hostname=config.host,
            port=config.port,
            timeout=config.timeout,
            use_tls=implicit_tls,
            start_tls=config.use_tls and not implicit_tls,
        )
        try:
            async with smtp:
                if config.username and config.password:
                    await smtp.login(config.username, config.password)
                await smtp.send_message(msg)
        except aiosmtplib.SMTPException as e:
            raise EmailDeliveryError(to_email, str(e) or type(e).__name__) from e
        except (TimeoutError, OSError) as e:
            raise EmailDeliveryError(to_email, str(e) or type(e).__name__) from e
        logger.info("Email sent: subject=%r message_id=%s", subject, msg["Message-ID"])
