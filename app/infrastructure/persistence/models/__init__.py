"""ORM models. Import here so Alembic autogenerate sees every table."""

from app.infrastructure.persistence.models.refresh_token import RefreshToken
from app.infrastructure.persistence.models.user import User

__all__ = ["RefreshToken", "User"]
