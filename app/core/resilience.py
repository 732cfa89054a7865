"""Centralised resilience settings: per-call timeouts for external collaborators.

Services never hard-code timeouts; they take a ResilienceConfig (usually
from_settings()) and bound each store / SMTP call with it.
"""

import logging
from dataclasses import dataclass

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResilienceConfig:
    """Timeouts (seconds) for the key-value store and external APIs."""

    redis_timeout: float = 5.0
    external_timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ResilienceConfig":
        """Build from application settings (defaults to get_settings())."""
        settings = settings or get_settings()
        config = cls(
            redis_timeout=settings.redis_timeout_seconds,
            external_timeout=settings.external_timeout_seconds,
        )
        logger.debug(
            "Resilience configuration: redis=%ss external=%ss",
            config.redis_timeout,
            config.external_timeout,
        )
        return config
