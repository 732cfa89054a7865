"""Rotating refresh token. Only the SHA-256 of the opaque token is stored.

Rows are never deleted on revocation: a revoked row is what lets a replayed
token be recognised as reuse. Only expired rows are purged.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class RefreshToken(CuidMixin, CreatedAtMixin, Base):
    """Refresh token row. Table: refresh_token; unique index on token_hash."""

    __tablename__ = "refresh_token"

    user_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
