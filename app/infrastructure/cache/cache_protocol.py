"""Key-value store protocol used by the abuse-mitigation services (DIP).

Implemented by RedisStore; tests provide an in-memory double. Every method
raises StoreUnavailableError when the backing store cannot answer, so the
caller decides the fallback (see app.infrastructure.cache.fallback).
"""

from datetime import timedelta
from typing import Protocol

# TTLs are accepted as timedelta or seconds; stored with millisecond precision.
TTL = timedelta | int | float


class KeyValueStore(Protocol):
    """Atomic single-key primitives of an external key-value store."""

    def is_available(self) -> bool:
        """Return True if the store is connected and usable."""
        ...

    async def get(self, key: str) -> str | None:
        """Return the raw value or None if the key is absent."""
        ...

    async def set(self, key: str, value: str, ttl: TTL | None = None) -> None:
        """Store value, optionally expiring after ttl."""
        ...

    async def increment(self, key: str) -> int:
        """Atomically increment an integer counter; return the new value."""
        ...

    async def expire(self, key: str, ttl: TTL) -> bool:
        """Set a TTL on an existing key; False if the key does not exist."""
        ...

    async def delete(self, *keys: str) -> int:
        """Delete keys; return how many existed."""
        ...

    async def has_key(self, key: str) -> bool:
        """Return True if the key exists."""
        ...

    async def get_expire(self, key: str) -> int | None:
        """Remaining TTL in whole seconds, or None if absent or persistent."""
        ...

    async def set_if_absent(self, key: str, value: str, ttl: TTL) -> bool:
        """Atomically write key only if missing; True if this call wrote it."""
        ...

    async def scan(self, pattern: str) -> list[str]:
        """Return all keys matching a glob-style pattern (non-blocking SCAN)."""
        ...

    async def count(self, pattern: str) -> int:
        """Return how many keys match a glob-style pattern."""
        ...
