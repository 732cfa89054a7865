"""Fixed-window counter rate limiter over the key-value store."""

from __future__ import annotations

import logging
from datetime import timedelta

from app.domain.exceptions import RateLimitExceededException
from app.infrastructure.cache.cache_protocol import KeyValueStore
from app.infrastructure.cache.keys import normalize_identity, rate_limit_key
from app.infrastructure.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allow at most `limit` actions per identity per `window`.

    The window starts at the first counted action (TTL is set only when the
    counter is created) and is not extended by later actions. When the
    store is unavailable the limiter fails open.
    """

    def __init__(
        self,
        store: KeyValueStore,
        namespace: str,
        limit: int,
        window: timedelta,
    ) -> None:
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        if window <= timedelta(0):
            raise ValueError(f"window must be positive, got {window}")
        self.store = store
        self.namespace = namespace
        self.limit = limit
        self.window = window

    async def allow(self, identity: str) -> bool:
        """Count one action for identity; return False once the limit is exceeded."""
        key = rate_limit_key(self.namespace, normalize_identity(identity))
        try:
            count = await self.store.increment(key)
            if count == 1:
                await self.store.expire(key, self.window)
        except StoreUnavailableError as e:
            logger.warning(
                "Rate limiter %s unavailable (%s); allowing action", self.namespace, e.reason
            )
            return True
        if count > self.limit:
            logger.warning(
                "Rate limit exceeded: namespace=%s count=%s limit=%s",
                self.namespace,
                count,
                self.limit,
            )
            return False
        return True

    async def check(self, identity: str) -> None:
        """Like allow(), but raise RateLimitExceededException when denied."""
        if not await self.allow(identity):
            raise RateLimitExceededException(
                normalize_identity(identity), self.limit, self.namespace
            )
