"""Refresh token rotation with reuse detection.

Tokens are opaque random strings handed to the client once; only their
SHA-256 is persisted. Each token can be redeemed exactly once: redeeming
revokes it and issues a successor. Presenting a revoked token again is
treated as theft and revokes every token of the user.

Callers run each operation inside one database transaction
(get_db_transactional) so revoke-then-issue commits atomically.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import NoReturn

from app.application.dtos.refresh_token import IssuedRefreshToken, RefreshTokenRecord
from app.application.interfaces.repositories import IRefreshTokenRepository
from app.core.config import get_settings
from app.domain.exceptions import (
    RefreshTokenExpiredException,
    RefreshTokenReuseException,
    ResourceNotFoundException,
)
from app.shared.telemetry.tracing import add_span_event, traced
from app.shared.utils.datetime import utc_now
from app.shared.utils.digest import sha256_hex
from app.shared.utils.generators import generate_opaque_token

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    """SHA-256 hex of a plain refresh token (the persisted lookup key)."""
    return sha256_hex(token)


class RefreshTokenService:
    """Issue, rotate and revoke refresh tokens."""

    def __init__(
        self,
        token_repo: IRefreshTokenRepository,
        lifetime: timedelta | None = None,
    ) -> None:
        self.token_repo = token_repo
        self.lifetime = lifetime or timedelta(days=get_settings().refresh_token_expire_days)

    @traced("refresh_token.create")
    async def create_refresh_token(self, user_id: str) -> IssuedRefreshToken:
        """Revoke the user's existing tokens and issue a new one."""
        await self.token_repo.revoke_all_for_user(user_id)
        plain = generate_opaque_token()
        record = await self.token_repo.create_token(
            user_id=user_id,
            token_hash=hash_token(plain),
            expires_at=utc_now() + self.lifetime,
        )
        logger.info("Refresh token created for user: %s", user_id)
        return IssuedRefreshToken(
            id=record.id,
            user_id=record.user_id,
            token=plain,
            expires_at=record.expires_at,
            created_at=record.created_at,
            revoked=False,
        )

    async def find_active(self, token: str) -> RefreshTokenRecord | None:
        """Return the record if the token is neither revoked nor expired."""
        record = await self.token_repo.get_by_token_hash(hash_token(token))
        if record is None or record.revoked or record.is_expired():
            return None
        return record

    @traced("refresh_token.verify_and_rotate")
    async def verify_and_rotate(self, token: str) -> IssuedRefreshToken:
        """Redeem a token once and return its successor.

        Raises:
            ResourceNotFoundException: Unknown token.
            RefreshTokenReuseException: Token was already revoked; all of the
                user's tokens have now been revoked.
            RefreshTokenExpiredException: Token expired; nothing is changed.
        """
        token_hash = hash_token(token)
        record = await self.token_repo.get_by_token_hash(token_hash)
        if record is None:
            # Log a hash prefix, never the token itself.
            raise ResourceNotFoundException("refresh_token", token_hash[:12])

        if record.revoked:
            await self._handle_reuse(record.user_id)

        if record.is_expired():
            raise RefreshTokenExpiredException()

        # Lost the race against a concurrent redemption of the same token.
        if not await self.token_repo.mark_revoked(record.id):
            await self._handle_reuse(record.user_id)
        return await self.create_refresh_token(record.user_id)

    async def _handle_reuse(self, user_id: str) -> NoReturn:
        logger.warning("Attempted reuse of revoked refresh token for user: %s", user_id)
        add_span_event("refresh_token.reuse_detected", {"user_id": user_id})
        await self.token_repo.revoke_all_for_user(user_id)
        raise RefreshTokenReuseException(user_id)

    async def revoke_token(self, token: str) -> None:
        """Revoke a single token. Unknown or already revoked tokens are ignored."""
        record = await self.token_repo.get_by_token_hash(hash_token(token))
        if record is None or record.revoked:
            return
        await self.token_repo.mark_revoked(record.id)
        logger.info("Refresh token revoked")

    async def revoke_all_user_tokens(self, user_id: str) -> int:
        count = await self.token_repo.revoke_all_for_user(user_id)
        logger.info("All refresh tokens revoked for user: %s", user_id)
        return count

    async def cleanup_expired_tokens(self, now: datetime | None = None) -> int:
        """Delete tokens whose expiry has passed. Revoked live tokens are kept."""
        return await self.token_repo.delete_expired(now or utc_now())
