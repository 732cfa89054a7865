"""Process-wide infrastructure dependencies (store, cache facade, email)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.application.services.email_service import EmailService, email_rate_limiter
from app.application.services.login_attempt_service import (
    LocalAttemptFallback,
    LockoutPolicy,
)
from app.core.config import get_settings
from app.infrastructure.cache import CacheService, KeyValueStore, RedisStore
from app.infrastructure.external.email import SmtpEmailSender


def get_store(request: Request) -> KeyValueStore:
    """Shared key-value store from app.state.

    Falls back to an unconnected RedisStore (every call reports the store
    unavailable) when the lifespan has not run, e.g. under a bare ASGI client.
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = RedisStore()
        request.app.state.store = store
    return store


def get_login_fallback(request: Request) -> LocalAttemptFallback:
    """The process's in-memory login counters (used only during store outages)."""
    fallback = getattr(request.app.state, "login_fallback", None)
    if fallback is None:
        settings = get_settings()
        fallback = LocalAttemptFallback(
            LockoutPolicy.from_settings(settings),
            max_entries=settings.login_fallback_max_entries,
        )
        request.app.state.login_fallback = fallback
    return fallback


def get_cache_service(
    store: Annotated[KeyValueStore, Depends(get_store)],
) -> CacheService:
    return CacheService(store)


def get_email_service(
    request: Request,
    store: Annotated[KeyValueStore, Depends(get_store)],
) -> EmailService:
    """EmailService over the shared SMTP sender with the per-recipient limiter."""
    sender = getattr(request.app.state, "email_sender", None)
    if sender is None:
        sender = SmtpEmailSender()
        request.app.state.email_sender = sender
    return EmailService(sender, rate_limiter=email_rate_limiter(store))
