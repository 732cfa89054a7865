"""DTOs for refresh token rotation (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from app.shared.utils.datetime import ensure_utc, utc_now


@dataclass(frozen=True)
class RefreshTokenRecord:
    """Persisted refresh token as seen by the application (hash only)."""

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    revoked: bool
    created_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once expires_at is not in the future."""
        expires_at = ensure_utc(self.expires_at)
        return expires_at is not None and expires_at <= (now or utc_now())


@dataclass(frozen=True)
class IssuedRefreshToken:
    """A freshly issued refresh token carrying the plain value (never persisted)."""

    id: str
    user_id: str
    token: str
    expires_at: datetime
    created_at: datetime
    revoked: bool = False
