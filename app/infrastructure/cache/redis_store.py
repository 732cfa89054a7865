"""Redis-backed KeyValueStore.

Owns the process-wide redis.asyncio connection pool (connect() at startup,
disconnect() at shutdown) and exposes the atomic single-key primitives the
abuse-mitigation services rely on. Every call is bounded by the configured
store timeout; connection errors, protocol errors and timeouts surface as
StoreUnavailableError and are never retried here.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import timedelta
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import get_settings
from app.core.resilience import ResilienceConfig
from app.infrastructure.cache.cache_protocol import TTL
from app.infrastructure.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SCAN page size hint; keeps each round-trip small on large keyspaces.
SCAN_COUNT = 100


def ttl_to_ms(ttl: TTL) -> int:
    """Convert a timedelta or seconds value to whole milliseconds (min 1)."""
    if isinstance(ttl, timedelta):
        ms = int(ttl.total_seconds() * 1000)
    else:
        ms = int(ttl * 1000)
    if ms <= 0:
        raise ValueError(f"TTL must be positive, got {ttl!r}")
    return ms


class RedisStore:
    """Async Redis key-value store with per-call timeouts.

    Uses app.core.config for connection settings. Pass redis_client for
    tests or DI; otherwise call connect() at startup.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        resilience: ResilienceConfig | None = None,
    ) -> None:
        """Initialize store.

        Args:
            redis_client: Optional Redis client for testing or DI.
            resilience: Timeouts; defaults to ResilienceConfig.from_settings().
        """
        self.redis = redis_client
        self.resilience = resilience or ResilienceConfig.from_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        settings = get_settings()
        try:
            self.redis = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password.get_secret_value() if settings.redis_password else None,
                decode_responses=True,
                max_connections=settings.redis_max_connections,
                socket_connect_timeout=self.resilience.redis_timeout,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis store connected: %s:%s",
                settings.redis_host,
                settings.redis_port,
            )
        except (RedisError, OSError) as e:
            logger.warning(
                "Redis connection failed: %s. Store disabled; services degrade to fallbacks.",
                e,
            )
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis store disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    def _client(self, operation: str) -> redis.Redis:
        if not self.is_available() or self.redis is None:
            raise StoreUnavailableError(operation, "not connected")
        return self.redis

    async def _call(self, operation: str, call: Awaitable[T]) -> T:
        """Await a Redis call under the store timeout, mapping failures."""
        try:
            return await asyncio.wait_for(call, timeout=self.resilience.redis_timeout)
        except TimeoutError as e:
            raise StoreUnavailableError(operation, "timeout") from e
        except RedisError as e:
            raise StoreUnavailableError(operation, str(e) or type(e).__name__) from e

    async def get(self, key: str) -> str | None:
        client = self._client("get")
        return await self._call("get", client.get(key))

    async def set(self, key: str, value: str, ttl: TTL | None = None) -> None:
        client = self._client("set")
        px = ttl_to_ms(ttl) if ttl is not None else None
        await self._call("set", client.set(key, value, px=px))

    async def increment(self, key: str) -> int:
        client = self._client("increment")
        return int(await self._call("increment", client.incr(key)))

    async def expire(self, key: str, ttl: TTL) -> bool:
        client = self._client("expire")
        return bool(await self._call("expire", client.pexpire(key, ttl_to_ms(ttl))))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        client = self._client("delete")
        return int(await self._call("delete", client.delete(*keys)))

    async def has_key(self, key: str) -> bool:
        client = self._client("has_key")
        return int(await self._call("has_key", client.exists(key))) > 0

    async def get_expire(self, key: str) -> int | None:
        """Remaining TTL in seconds; None when the key is absent (-2) or has no TTL (-1)."""
        client = self._client("get_expire")
        seconds = int(await self._call("get_expire", client.ttl(key)))
        if seconds < 0:
            return None
        return seconds

    async def set_if_absent(self, key: str, value: str, ttl: TTL) -> bool:
        client = self._client("set_if_absent")
        result: Any = await self._call(
            "set_if_absent", client.set(key, value, px=ttl_to_ms(ttl), nx=True)
        )
        return bool(result)

    async def scan(self, pattern: str) -> list[str]:
        """Collect keys matching pattern with SCAN (never KEYS)."""
        client = self._client("scan")

        async def _collect() -> list[str]:
            return [key async for key in client.scan_iter(match=pattern, count=SCAN_COUNT)]

        return await self._call("scan", _collect())

    async def count(self, pattern: str) -> int:
        return len(await self.scan(pattern))
