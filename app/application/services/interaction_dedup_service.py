"""Per-IP, per-article guard for view and like counters.

The caller increments its counter only when record_*_if_new returns True.
IPs are never stored: the marker key carries a truncated SHA-256 of the IP.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta

from app.core.config import Settings, get_settings
from app.core.constants import IP_HASH_LENGTH
from app.infrastructure.cache.cache_protocol import KeyValueStore
from app.infrastructure.cache.fallback import or_else
from app.infrastructure.cache.keys import like_marker_key, view_marker_key
from app.shared.utils.client_ip import DEFAULT_TRUSTED_PROXIES, extract_client_ip
from app.shared.utils.digest import sha256_hex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """The parts of an inbound request needed to identify the client."""

    headers: Mapping[str, str] = field(default_factory=dict)
    remote_addr: str | None = None


def hash_ip(ip: str) -> str:
    """Deterministic one-way identifier for an IP (first 16 hex chars of SHA-256)."""
    return sha256_hex(ip, IP_HASH_LENGTH)


class InteractionDedupService:
    """Decides whether a view or like from a client should be counted."""

    def __init__(
        self,
        store: KeyValueStore,
        trusted_proxies: Iterable[str] = DEFAULT_TRUSTED_PROXIES,
        view_ttl: timedelta = timedelta(hours=24),
        like_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self.store = store
        self.trusted_proxies = frozenset(trusted_proxies)
        self.view_ttl = view_ttl
        self.like_ttl = like_ttl

    @classmethod
    def from_settings(
        cls, store: KeyValueStore, settings: Settings | None = None
    ) -> InteractionDedupService:
        settings = settings or get_settings()
        return cls(
            store,
            trusted_proxies=settings.trusted_proxy_set,
            view_ttl=timedelta(hours=settings.view_dedup_ttl_hours),
            like_ttl=timedelta(days=settings.like_dedup_ttl_days),
        )

    async def record_view_if_new(self, slug: str, request: RequestContext) -> bool:
        """True if this client has not viewed the article within the view window."""
        return await self._record_if_new(slug, request, view_marker_key, self.view_ttl, "view")

    async def record_like_if_new(self, slug: str, request: RequestContext) -> bool:
        """True if this client has not liked the article within the like window."""
        return await self._record_if_new(slug, request, like_marker_key, self.like_ttl, "like")

    async def _record_if_new(
        self,
        slug: str,
        request: RequestContext,
        key_for: Callable[[str, str], str],
        ttl: timedelta,
        action: str,
    ) -> bool:
        ip = extract_client_ip(request.headers, request.remote_addr, self.trusted_proxies)
        if ip is None:
            logger.debug("Skipping %s dedup for %s: client IP unknown", action, slug)
            return False
        key = key_for(slug, hash_ip(ip))
        # Store errors count the interaction.
        return await or_else(
            self.store.set_if_absent(key, "1", ttl), True, operation=f"dedup.{action}"
        )
