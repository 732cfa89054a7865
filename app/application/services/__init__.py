"""Application services: abuse mitigation, token rotation, email and auth."""

from app.application.services.auth_service import AuthService
from app.application.services.email_service import EmailService, email_rate_limiter
from app.application.services.interaction_dedup_service import (
    InteractionDedupService,
    RequestContext,
    hash_ip,
)
from app.application.services.login_attempt_service import (
    LocalAttemptFallback,
    LockoutPolicy,
    LoginAttemptService,
)
from app.application.services.rate_limiter import RateLimiter
from app.application.services.refresh_token_service import (
    RefreshTokenService,
    hash_token,
)

__all__ = [
    "AuthService",
    "EmailService",
    "InteractionDedupService",
    "LocalAttemptFallback",
    "LockoutPolicy",
    "LoginAttemptService",
    "RateLimiter",
    "RefreshTokenService",
    "RequestContext",
    "email_rate_limiter",
    "hash_ip",
    "hash_token",
]
