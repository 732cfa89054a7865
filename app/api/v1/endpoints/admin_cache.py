"""Admin cache API: namespace statistics and invalidation (ADMIN role)."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path

from app.api.v1.dependencies import get_cache_service, get_current_admin
from app.infrastructure.cache import CacheService
from app.schemas.cache import CacheInvalidationResponse, CacheStatsResponse

router = APIRouter()

Admin = Annotated[dict[str, Any], Depends(get_current_admin)]
Cache = Annotated[CacheService, Depends(get_cache_service)]
KeyPart = Annotated[str, Path(min_length=1, max_length=200, pattern=r"^[A-Za-z0-9_-]+$")]


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(_: Admin, cache: Cache) -> CacheStatsResponse:
    stats = await cache.get_cache_stats()
    return CacheStatsResponse(**stats.to_dict(), available=cache.is_available())


@router.delete("", response_model=CacheInvalidationResponse)
async def invalidate_all(_: Admin, cache: Cache) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(scope="all", deleted=await cache.invalidate_all_caches())


@router.delete("/articles", response_model=CacheInvalidationResponse)
async def invalidate_articles(_: Admin, cache: Cache) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(
        scope="articles", deleted=await cache.invalidate_all_articles()
    )


@router.delete("/articles/{slug}", response_model=CacheInvalidationResponse)
async def invalidate_article(slug: KeyPart, _: Admin, cache: Cache) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(
        scope=f"article:{slug}", deleted=await cache.invalidate_article(slug)
    )


@router.delete("/tags", response_model=CacheInvalidationResponse)
async def invalidate_tags(_: Admin, cache: Cache) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(scope="tags", deleted=await cache.invalidate_all_tags())


@router.delete("/tags/{tag_slug}", response_model=CacheInvalidationResponse)
async def invalidate_articles_by_tag(
    tag_slug: KeyPart, _: Admin, cache: Cache
) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(
        scope=f"tag:{tag_slug}", deleted=await cache.invalidate_articles_by_tag(tag_slug)
    )


@router.delete("/comments", response_model=CacheInvalidationResponse)
async def invalidate_comments(_: Admin, cache: Cache) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(
        scope="comments", deleted=await cache.invalidate_all_comments()
    )


@router.delete("/comments/{article_id}", response_model=CacheInvalidationResponse)
async def invalidate_article_comments(
    article_id: KeyPart, _: Admin, cache: Cache
) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(
        scope=f"comments:{article_id}", deleted=await cache.invalidate_comments(article_id)
    )


@router.delete("/search", response_model=CacheInvalidationResponse)
async def invalidate_search(_: Admin, cache: Cache) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(scope="search", deleted=await cache.invalidate_search_cache())


@router.delete("/feed", response_model=CacheInvalidationResponse)
async def invalidate_feed(_: Admin, cache: Cache) -> CacheInvalidationResponse:
    return CacheInvalidationResponse(scope="feed", deleted=await cache.invalidate_feed_cache())
