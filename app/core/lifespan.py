"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (key-value store,
local login fallback, SMTP sender, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.application.services.login_attempt_service import (
    LocalAttemptFallback,
    LockoutPolicy,
)
from app.core.config import get_settings
from app.core.resilience import ResilienceConfig
from app.infrastructure.cache.redis_store import RedisStore
from app.infrastructure.external.email.smtp_sender import (
    SmtpEmailSender,
    smtp_config_from_settings,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: key-value store (connected only if enabled), local
    login fallback, SMTP sender. Shutdown order: store disconnect, SQL
    engine dispose.
    """
    settings = get_settings()
    resilience = ResilienceConfig.from_settings(settings)

    # ---- Startup ----
    store = RedisStore(resilience=resilience)
    if settings.redis_enabled:
        await store.connect()
    else:
        logger.info("Redis disabled; abuse-mitigation services run on fallbacks")
    app.state.store = store

    app.state.login_fallback = LocalAttemptFallback(
        LockoutPolicy.from_settings(settings),
        max_entries=settings.login_fallback_max_entries,
    )
    app.state.email_sender = SmtpEmailSender(smtp_config_from_settings(settings, resilience))

    yield

    # ---- Shutdown ----
    if getattr(app.state, "store", None) is not None:
        await app.state.store.disconnect()

    from app.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
