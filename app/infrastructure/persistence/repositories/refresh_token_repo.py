"""Refresh token repository. Keyed by token hash; returns application DTOs."""

import logging
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.refresh_token import RefreshTokenRecord
from app.infrastructure.persistence.models.refresh_token import RefreshToken
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


def _token_to_record(t: RefreshToken) -> RefreshTokenRecord:
    """Map ORM RefreshToken to RefreshTokenRecord."""
    return RefreshTokenRecord(
        id=t.id,
        user_id=t.user_id,
        token_hash=t.token_hash,
        expires_at=ensure_utc(t.expires_at),
        revoked=t.revoked,
        created_at=ensure_utc(t.created_at),
    )


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence for rotating refresh tokens (hash only, never the plain value)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RefreshToken)

    async def create_token(
        self, user_id: str, token_hash: str, expires_at: datetime
    ) -> RefreshTokenRecord:
        token = RefreshToken(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            revoked=False,
        )
        created = await self.create(token)
        return _token_to_record(created)

    async def get_by_token_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        result = await self.db.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        token = result.scalar_one_or_none()
        return _token_to_record(token) if token else None

    async def mark_revoked(self, token_id: str) -> bool:
        """Revoke one live token; False when it was already revoked (or missing).

        The conditional UPDATE is the redemption lock: of two concurrent
        callers only one matches the row.
        """
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked.is_(False))
            .values(revoked=True)
        )
        await self.db.flush()
        return bool(result.rowcount)

    async def revoke_all_for_user(self, user_id: str) -> int:
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
            .values(revoked=True)
        )
        await self.db.flush()
        return result.rowcount or 0

    async def delete_expired(self, before: datetime) -> int:
        result = await self.db.execute(
            delete(RefreshToken).where(RefreshToken.expires_at < before)
        )
        await self.db.flush()
        count = result.rowcount or 0
        if count:
            logger.info("Deleted %s expired refresh tokens", count)
        return count
