"""Core: config, constants, resilience settings, and application bootstrap.

Single place for settings and shared constants.
"""

from app.core.config import Settings, get_settings
from app.core.resilience import ResilienceConfig

__all__ = ["ResilienceConfig", "Settings", "get_settings"]
