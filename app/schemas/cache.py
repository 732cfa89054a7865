"""Admin cache endpoint schemas."""

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    """Entry counts per cache namespace."""

    articles_count: int = 0
    tags_count: int = 0
    comments_count: int = 0
    search_count: int = 0
    feed_count: int = 0
    total: int = 0
    available: bool = Field(..., description="False when the key-value store is down")


class CacheInvalidationResponse(BaseModel):
    """Result of an invalidation request."""

    scope: str = Field(..., description="What was invalidated (e.g. articles, article:my-slug)")
    deleted: int = Field(..., description="Number of cache entries removed")
