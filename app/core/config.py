"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. SECRET_KEY) are validated at
load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except secret_key, which is
    checked in validate_required_and_limits together with the lockout and
    rate-limit bounds.
    """

    # App
    app_name: str = "inkwell"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # Login lockout: lockout minutes = base * min(attempts - max + 1, max_multiplier)
    login_max_attempts: int = 5
    login_attempt_window_minutes: int = 15
    login_lockout_base_minutes: int = 5
    login_lockout_max_multiplier: int = 6
    # Upper bound on identities kept by the in-process fallback counters.
    login_fallback_max_entries: int = 10_000

    # Interaction dedup windows
    view_dedup_ttl_hours: int = 24
    like_dedup_ttl_days: int = 7

    # Proxies allowed to set X-Forwarded-For / X-Real-IP (comma separated).
    trusted_proxies: str = "127.0.0.1,::1,0:0:0:0:0:0:0:1"

    # Email (SMTP)
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    email_from: str = "noreply@localhost"
    email_from_name: str = "Portfolio Blog"
    email_rate_limit_per_hour: int = 10

    # CORS
    allowed_origins: str = "http://localhost:4200,http://localhost:8080"

    # Resilience: per-call timeouts for the key-value store and external APIs.
    redis_timeout_seconds: float = 5.0
    external_timeout_seconds: float = 30.0

    # Redis
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_max_connections: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required_and_limits(self) -> "Settings":
        """Validate required secrets and positive limits."""
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        positive = {
            "login_max_attempts": self.login_max_attempts,
            "login_attempt_window_minutes": self.login_attempt_window_minutes,
            "login_lockout_base_minutes": self.login_lockout_base_minutes,
            "login_lockout_max_multiplier": self.login_lockout_max_multiplier,
            "email_rate_limit_per_hour": self.email_rate_limit_per_hour,
            "refresh_token_expire_days": self.refresh_token_expire_days,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name.upper()} must be positive, got: {value}")
        return self

    @property
    def trusted_proxy_set(self) -> frozenset[str]:
        """Trusted proxy addresses as a set (blank entries dropped)."""
        return frozenset(p.strip() for p in self.trusted_proxies.split(",") if p.strip())


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
