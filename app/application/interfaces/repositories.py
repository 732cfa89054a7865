"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.refresh_token import RefreshTokenRecord
    from app.application.dtos.user import UserResult


class IUserRepository(Protocol):
    """Protocol for user lookups needed by auth and lockout notification."""

    async def get_user_by_id(self, user_id: str) -> UserResult | None:
        """Return user by id or None."""

    async def get_user_by_email(self, email: str) -> UserResult | None:
        """Return user by (lowercase) email or None."""

    async def authenticate(self, email: str, password: str) -> UserResult | None:
        """Return the active user when the password matches; None otherwise.

        Implementations spend the same hashing work whether or not the user exists.
        """


class IRefreshTokenRepository(Protocol):
    """Protocol for refresh token persistence (hash-keyed)."""

    async def create_token(
        self, user_id: str, token_hash: str, expires_at: datetime
    ) -> RefreshTokenRecord:
        """Insert a non-revoked token row."""

    async def get_by_token_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        """Return the token row (revoked or not) for a hash, or None."""

    async def mark_revoked(self, token_id: str) -> bool:
        """Atomically revoke one live token row; False if already revoked or missing."""

    async def revoke_all_for_user(self, user_id: str) -> int:
        """Revoke every non-revoked token of the user; return rows changed."""

    async def delete_expired(self, before: datetime) -> int:
        """Delete rows whose expires_at is before the given instant."""
