"""Key-value store access: Redis adapter, fallback combinator, cache facade.

RedisStore owns the connection; services depend on the KeyValueStore
protocol. Key format lives in keys.py (DRY).
"""

from app.infrastructure.cache.cache_protocol import TTL, KeyValueStore
from app.infrastructure.cache.fallback import or_else
from app.infrastructure.cache.redis_cache import CacheService, CacheStats
from app.infrastructure.cache.redis_store import RedisStore

__all__ = [
    "TTL",
    "CacheService",
    "CacheStats",
    "KeyValueStore",
    "RedisStore",
    "or_else",
]
