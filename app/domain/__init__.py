"""Domain layer: exceptions describing business rule violations.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.exceptions import (
    AccountLockedException,
    AuthenticationException,
    AuthorizationException,
    InactiveAccountException,
    InkwellException,
    RateLimitExceededException,
    RefreshTokenExpiredException,
    RefreshTokenReuseException,
    ResourceNotFoundException,
    SecurityViolationException,
    ValidationException,
)

__all__ = [
    "AccountLockedException",
    "AuthenticationException",
    "AuthorizationException",
    "InactiveAccountException",
    "InkwellException",
    "RateLimitExceededException",
    "RefreshTokenExpiredException",
    "RefreshTokenReuseException",
    "ResourceNotFoundException",
    "SecurityViolationException",
    "ValidationException",
]
