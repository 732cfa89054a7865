"""Cache invalidation facade over the key-value store.

Generic JSON get/set/delete plus namespace-level invalidation for the
blog's cached content (articles, tags, comments, search, feed) and a
per-namespace entry count. Every operation degrades to an empty/zero
result when no store is configured or the store errors.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, dataclass
from typing import Any

from app.core.constants import ARTICLES_CACHE_PREFIX, COMMENTS_CACHE_PREFIX
from app.infrastructure.cache.cache_protocol import TTL, KeyValueStore
from app.infrastructure.cache.fallback import or_else
from app.infrastructure.cache.keys import (
    ALL_ARTICLES_PATTERN,
    ALL_COMMENTS_PATTERN,
    ALL_FEED_PATTERN,
    ALL_SEARCH_PATTERN,
    ALL_TAGS_PATTERN,
    namespace_pattern,
    validate_pattern_component,
)
from app.infrastructure.exceptions import StoreUnavailableError
from app.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)

# Keys per DEL round-trip when bulk-deleting a namespace.
DELETE_CHUNK_SIZE = 500


@dataclass(frozen=True)
class CacheStats:
    """Entry counts per cache namespace."""

    articles_count: int = 0
    tags_count: int = 0
    comments_count: int = 0
    search_count: int = 0
    feed_count: int = 0

    @property
    def total(self) -> int:
        return (
            self.articles_count
            + self.tags_count
            + self.comments_count
            + self.search_count
            + self.feed_count
        )

    def to_dict(self) -> dict[str, int]:
        return {**asdict(self), "total": self.total}


class CacheService:
    """Cache facade with graceful degradation.

    Args:
        store: Key-value store, or None when caching is disabled.
    """

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self.store = store

    def is_available(self) -> bool:
        """Return True if a store is configured and connected."""
        return self.store is not None and self.store.is_available()

    # ---- Generic operations ----

    async def get(self, key: str) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing/unavailable."""
        if self.store is None:
            return None
        raw = await or_else(self.store.get(key), None, operation="cache.get")
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache value for key %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: TTL = 300) -> bool:
        """Store value (JSON-serialized) with TTL. Returns True on success."""
        if self.store is None:
            return False
        try:
            await self.store.set(key, json.dumps(value), ttl)
        except StoreUnavailableError as e:
            logger.warning("Cache set unavailable for key %s (%s)", key, e.reason)
            return False
        logger.debug("Cache SET: %s (TTL: %s)", key, ttl)
        return True

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True if a key was deleted."""
        if self.store is None:
            return False
        deleted = await or_else(self.store.delete(key), 0, operation="cache.delete")
        if deleted:
            logger.debug("Cache DELETE: %s", key)
        return deleted > 0

    # ---- Pattern helpers ----

    @staticmethod
    async def _delete_by_pattern(store: KeyValueStore, pattern: str) -> int:
        """SCAN for pattern then DEL matches in chunks. Raises StoreUnavailableError."""
        keys = await store.scan(pattern)
        deleted = 0
        for start in range(0, len(keys), DELETE_CHUNK_SIZE):
            deleted += await store.delete(*keys[start : start + DELETE_CHUNK_SIZE])
        return deleted

    async def _invalidate(self, pattern: str, label: str) -> int:
        if self.store is None:
            return 0
        count = await or_else(
            self._delete_by_pattern(self.store, pattern), 0, operation=f"cache.invalidate.{label}"
        )
        logger.info("Invalidated %s %s cache entries", count, label)
        return count

    async def _count(self, pattern: str) -> int:
        if self.store is None:
            return 0
        return await or_else(self.store.count(pattern), 0, operation="cache.stats")

    # ---- Domain-specific invalidation ----

    async def invalidate_all_articles(self) -> int:
        return await self._invalidate(ALL_ARTICLES_PATTERN, "article")

    async def invalidate_article(self, slug: str) -> int:
        """Invalidate one article's entries plus the published listing pages."""
        validate_pattern_component(slug, "slug")
        counts = await asyncio.gather(
            self._invalidate(namespace_pattern(ARTICLES_CACHE_PREFIX, f"slug_{slug}"), "article"),
            self._invalidate(namespace_pattern(ARTICLES_CACHE_PREFIX, f"related_{slug}*"), "article"),
            self._invalidate(namespace_pattern(ARTICLES_CACHE_PREFIX, "published_page_*"), "article"),
        )
        logger.info("Invalidated cache for article: %s", slug)
        return sum(counts)

    async def invalidate_articles_by_tag(self, tag_slug: str) -> int:
        validate_pattern_component(tag_slug, "tag_slug")
        return await self._invalidate(
            namespace_pattern(ARTICLES_CACHE_PREFIX, f"tag_{tag_slug}*"), "tag article"
        )

    async def invalidate_all_tags(self) -> int:
        return await self._invalidate(ALL_TAGS_PATTERN, "tag")

    async def invalidate_comments(self, article_id: str) -> int:
        validate_pattern_component(article_id, "article_id")
        return await self._invalidate(
            namespace_pattern(COMMENTS_CACHE_PREFIX, f"{article_id}*"), "comment"
        )

    async def invalidate_all_comments(self) -> int:
        return await self._invalidate(ALL_COMMENTS_PATTERN, "comment")

    async def invalidate_search_cache(self) -> int:
        return await self._invalidate(ALL_SEARCH_PATTERN, "search")

    async def invalidate_feed_cache(self) -> int:
        """Invalidate RSS and sitemap entries."""
        return await self._invalidate(ALL_FEED_PATTERN, "feed")

    @traced("cache.invalidate_all")
    async def invalidate_all_caches(self) -> int:
        """Run every namespace invalidation concurrently; return the summed count."""
        counts = await asyncio.gather(
            self.invalidate_all_articles(),
            self.invalidate_all_tags(),
            self.invalidate_all_comments(),
            self.invalidate_search_cache(),
            self.invalidate_feed_cache(),
        )
        total = sum(counts)
        logger.info("Invalidated all caches: %s total entries", total)
        return total

    async def get_cache_stats(self) -> CacheStats:
        """Count entries in each namespace (five concurrent scans)."""
        if self.store is None:
            return CacheStats()
        articles, tags, comments, search, feed = await asyncio.gather(
            self._count(ALL_ARTICLES_PATTERN),
            self._count(ALL_TAGS_PATTERN),
            self._count(ALL_COMMENTS_PATTERN),
            self._count(ALL_SEARCH_PATTERN),
            self._count(ALL_FEED_PATTERN),
        )
        return CacheStats(
            articles_count=articles,
            tags_count=tags,
            comments_count=comments,
            search_count=search,
            feed_count=feed,
        )
