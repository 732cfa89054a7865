"""Application DTOs (frozen dataclasses; no ORM types)."""

from app.application.dtos.auth import TokenPair
from app.application.dtos.refresh_token import IssuedRefreshToken, RefreshTokenRecord
from app.application.dtos.user import UserResult

__all__ = [
    "IssuedRefreshToken",
    "RefreshTokenRecord",
    "TokenPair",
    "UserResult",
]
