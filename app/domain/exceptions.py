"""Domain exceptions for the inkwell application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class InkwellException(Exception):
    """Base exception for all inkwell application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(InkwellException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(InkwellException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "AUTHENTICATION_ERROR", details)


class InactiveAccountException(AuthenticationException):
    """Refresh attempted for a missing or deactivated user; their tokens were revoked."""

    def __init__(self, user_id: str) -> None:
        super().__init__("User not found or inactive")
        self.user_id = user_id


class AuthorizationException(InkwellException):
    """Raised when the caller lacks the role required for the operation."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, "PERMISSION_DENIED")


class ResourceNotFoundException(InkwellException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'refresh_token', 'user').
            resource_id: The ID that was not found (never a raw secret).
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SecurityViolationException(InkwellException):
    """Raised when a credential is presented that must not be honoured.

    Distinct from ResourceNotFoundException: the credential exists but is
    expired or has already been consumed.
    """

    def __init__(self, message: str = "Unauthorized", reason: str | None = None) -> None:
        details = {"reason": reason} if reason else {}
        super().__init__(message, "SECURITY_VIOLATION", details)


class RefreshTokenExpiredException(SecurityViolationException):
    """Refresh token is past its expiry; other tokens are left untouched."""

    def __init__(self) -> None:
        super().__init__("Refresh token expired", reason="expired")


class RefreshTokenReuseException(SecurityViolationException):
    """A revoked refresh token was presented again; the user's session chain was revoked."""

    def __init__(self, user_id: str) -> None:
        super().__init__("Refresh token reuse detected", reason="reuse")
        self.user_id = user_id


class RateLimitExceededException(InkwellException):
    """Raised when an identity exceeded its allowance for a rate-limited action."""

    def __init__(self, identity: str, limit: int, namespace: str) -> None:
        """Initialize with the limited identity and its configured threshold.

        Args:
            identity: Normalized identity (e.g. lowercase email).
            limit: Maximum allowed actions per window.
            namespace: Limiter namespace (e.g. 'email_rate').
        """
        super().__init__(
            f"Rate limit exceeded for {identity}. Max {limit} per window.",
            "RATE_LIMIT_EXCEEDED",
            {"identity": identity, "limit": limit, "namespace": namespace},
        )


class AccountLockedException(InkwellException):
    """Raised when login is attempted on a temporarily locked account."""

    def __init__(self, remaining_minutes: int) -> None:
        super().__init__(
            "Account temporarily locked",
            "ACCOUNT_LOCKED",
            {"remaining_minutes": remaining_minutes},
        )
        self.remaining_minutes = remaining_minutes
