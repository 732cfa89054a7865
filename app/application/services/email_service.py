"""Outbound email with a per-recipient hourly rate limit.

Every send goes through the email_rate limiter first; when the store is
down the limiter fails open. Account lockout notices are composed here and
never raise, so a mail outage cannot break the login flow.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from app.application.interfaces.services import IEmailSender
from app.application.services.rate_limiter import RateLimiter
from app.core.config import Settings, get_settings
from app.core.constants import EMAIL_RATE_NAMESPACE
from app.infrastructure.cache.cache_protocol import KeyValueStore
from app.shared.utils.client_ip import anonymize_ip
from app.shared.utils.sanitization import strip_html

logger = logging.getLogger(__name__)

EMAIL_RATE_WINDOW = timedelta(hours=1)

LOCKOUT_SUBJECT = "Security alert: your account was temporarily locked"

_LOCKOUT_TEMPLATE = """\
<html>
  <body style="font-family: sans-serif; color: #111827;">
    <h2 style="color: #b91c1c;">Account temporarily locked</h2>
    <p>Hello {name},</p>
    <p>We detected {attempts} failed sign-in attempts on your account and
    locked it for {minutes} minutes.</p>
    <ul>
      <li>Failed attempts: {attempts}</li>
      <li>Lock duration: {minutes} minutes</li>
      <li>Source IP: {ip}</li>
    </ul>
    <p>If this was you, wait for the lock to expire and try again.
    If it was not, consider changing your password once you can sign in.</p>
    <p>{app_name}</p>
  </body>
</html>
"""


def email_rate_limiter(
    store: KeyValueStore, settings: Settings | None = None
) -> RateLimiter:
    """Limiter keyed email_rate:<lowercase recipient>, limit per hour from settings."""
    settings = settings or get_settings()
    return RateLimiter(
        store,
        namespace=EMAIL_RATE_NAMESPACE,
        limit=settings.email_rate_limit_per_hour,
        window=EMAIL_RATE_WINDOW,
    )


class EmailService:
    """Send text and HTML emails; implements ISecurityNotifier.

    Args:
        sender: Transport (SmtpEmailSender in production).
        rate_limiter: Per-recipient limiter; None disables rate limiting.
        app_name: Signature line in notification emails.
    """

    def __init__(
        self,
        sender: IEmailSender,
        rate_limiter: RateLimiter | None = None,
        app_name: str | None = None,
    ) -> None:
        self.sender = sender
        self.rate_limiter = rate_limiter
        self.app_name = app_name or get_settings().email_from_name
        if rate_limiter is None:
            logger.info("Email rate limiting disabled (no key-value store)")

    async def _check_rate_limit(self, to_email: str) -> None:
        if self.rate_limiter is not None:
            await self.rate_limiter.check(to_email)

    async def send_text_email(self, to_email: str, subject: str, text: str) -> None:
        """Send plain text. Raises RateLimitExceededException or EmailDeliveryError."""
        await self._check_rate_limit(to_email)
        await self.sender.send(to_email, subject, text, html=False)
        logger.debug("Text email sent: subject=%r", subject)

    async def send_html_email(self, to_email: str, subject: str, html: str) -> None:
        """Send HTML. Raises RateLimitExceededException or EmailDeliveryError."""
        await self._check_rate_limit(to_email)
        await self.sender.send(to_email, subject, html, html=True)
        logger.debug("HTML email sent: subject=%r", subject)

    async def send_account_lockout_notification(
        self,
        email: str,
        name: str,
        attempts: int,
        lockout_minutes: int,
        client_ip: str | None = None,
    ) -> None:
        """Tell the account owner about the lockout. Failures are logged, not raised."""
        body = _LOCKOUT_TEMPLATE.format(
            name=strip_html(name) or strip_html(email),
            attempts=attempts,
            minutes=lockout_minutes,
            ip=anonymize_ip(client_ip),
            app_name=strip_html(self.app_name),
        )
        try:
            await self.send_html_email(email, LOCKOUT_SUBJECT, body)
        except Exception as e:
            logger.warning("Failed to send lockout notification: %s", e)
            return
        logger.info("Account lockout notification sent")
