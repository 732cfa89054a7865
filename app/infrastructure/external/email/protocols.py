"""Outbound email data structures (transport-agnostic)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OutboundEmail:
    """A single message ready to hand to an email sender."""

    to_email: str
    subject: str
    body: str
    html: bool = False


@dataclass(frozen=True)
class SmtpConfig:
    """SMTP connection parameters (built from settings)."""

    host: str
    port: int
    username: str | None
    password: str | None
    use_tls: bool
    from_address: str
    from_name: str
    timeout: float
