"""Per-request application services (one DB session per request)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies.infra import get_email_service, get_login_fallback, get_store
from app.application.services.auth_service import AuthService
from app.application.services.email_service import EmailService
from app.application.services.interaction_dedup_service import (
    InteractionDedupService,
    RequestContext,
)
from app.application.services.login_attempt_service import (
    LocalAttemptFallback,
    LoginAttemptService,
)
from app.application.services.refresh_token_service import RefreshTokenService
from app.infrastructure.cache import KeyValueStore
from app.infrastructure.persistence.database import get_db_transactional
from app.infrastructure.persistence.repositories import (
    RefreshTokenRepository,
    UserRepository,
)


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> UserRepository:
    return UserRepository(db)


async def get_refresh_token_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> RefreshTokenService:
    return RefreshTokenService(RefreshTokenRepository(db))


async def get_login_attempt_service(
    store: Annotated[KeyValueStore, Depends(get_store)],
    fallback: Annotated[LocalAttemptFallback, Depends(get_login_fallback)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> LoginAttemptService:
    return LoginAttemptService(
        store,
        user_repo=user_repo,
        notifier=email_service,
        policy=fallback.policy,
        fallback=fallback,
    )


async def get_auth_service(
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    login_attempts: Annotated[LoginAttemptService, Depends(get_login_attempt_service)],
    refresh_tokens: Annotated[RefreshTokenService, Depends(get_refresh_token_service)],
) -> AuthService:
    return AuthService(user_repo, login_attempts, refresh_tokens)


def get_dedup_service(
    store: Annotated[KeyValueStore, Depends(get_store)],
) -> InteractionDedupService:
    return InteractionDedupService.from_settings(store)


def get_request_context(request: Request) -> RequestContext:
    """Headers and direct peer address of the current request."""
    return RequestContext(
        headers=request.headers,
        remote_addr=request.client.host if request.client else None,
    )
