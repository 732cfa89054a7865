"""Pydantic request/response schemas for the HTTP API."""

from app.schemas.auth import LoginRequest, RefreshRequest, TokenResponse
from app.schemas.cache import CacheInvalidationResponse, CacheStatsResponse
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.interaction import InteractionResponse

__all__ = [
    "CacheInvalidationResponse",
    "CacheStatsResponse",
    "HealthResponse",
    "InteractionResponse",
    "LoginRequest",
    "RefreshRequest",
    "ReadinessResponse",
    "TokenResponse",
]
