"""Service interfaces (ports) for the application layer.

Protocols define contracts for outbound collaborators of application
services (DIP).
"""

from __future__ import annotations

from typing import Protocol


# Outbound email gateway (SMTP in production, a recorder in tests)
class IEmailSender(Protocol):
    """Protocol for delivering one email message."""

    async def send(
        self,
        to_email: str,
        subject: str,
        body: str,
        *,
        html: bool = False,
    ) -> None:
        """Deliver message. Raise EmailDeliveryError when the gateway refuses or times out."""


# Security notifications (lockout email sent once per lockout episode)
class ISecurityNotifier(Protocol):
    """Protocol for telling a user their account was temporarily locked."""

    async def send_account_lockout_notification(
        self,
        email: str,
        name: str,
        attempts: int,
        lockout_minutes: int,
        client_ip: str | None = None,
    ) -> None:
        """Send the lockout notice to the account owner."""
