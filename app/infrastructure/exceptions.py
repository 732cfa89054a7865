"""Infrastructure exceptions for the key-value store and external delivery.

They extend InkwellException so presentation can map them to HTTP
responses consistently if one ever escapes a service.
"""

from app.domain.exceptions import InkwellException


class StoreUnavailableError(InkwellException):
    """Key-value store is not configured, unreachable, timed out or errored."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Key-value store unavailable during {operation}",
            "STORE_UNAVAILABLE",
            {"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class EmailDeliveryError(InkwellException):
    """Outbound email could not be handed to the SMTP gateway."""

    def __init__(self, recipient: str, reason: str) -> None:
        super().__init__(
            f"Failed to send email to {recipient}",
            "EMAIL_DELIVERY_ERROR",
            {"recipient": recipient, "reason": reason},
        )
