"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers, never on infrastructure directly.
Process-wide collaborators (key-value store, local login fallback, email
sender) live on app.state and are created by the lifespan; per-request
services are built here around the request's database session.
"""

from app.api.v1.dependencies.auth import get_current_admin, get_current_claims
from app.api.v1.dependencies.infra import (
    get_cache_service,
    get_email_service,
    get_login_fallback,
    get_store,
)
from app.api.v1.dependencies.services import (
    get_auth_service,
    get_dedup_service,
    get_login_attempt_service,
    get_refresh_token_service,
    get_request_context,
    get_user_repo,
)

__all__ = [
    "get_auth_service",
    "get_cache_service",
    "get_current_admin",
    "get_current_claims",
    "get_dedup_service",
    "get_email_service",
    "get_login_attempt_service",
    "get_login_fallback",
    "get_refresh_token_service",
    "get_request_context",
    "get_store",
    "get_user_repo",
]
