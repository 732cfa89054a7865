"""Article view/like hooks.

Content counters live elsewhere; these routes only answer whether the
current client's view or like should be counted.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from app.api.v1.dependencies import get_dedup_service, get_request_context
from app.application.services.interaction_dedup_service import (
    InteractionDedupService,
    RequestContext,
)
from app.core.limiter import limit_interactions
from app.schemas.interaction import InteractionResponse

router = APIRouter()

SlugPath = Annotated[str, Path(min_length=1, max_length=200, pattern=r"^[a-z0-9][a-z0-9-]*$")]


@router.post("/{slug}/view", response_model=InteractionResponse)
@limit_interactions
async def record_view(
    request: Request,
    slug: SlugPath,
    context: Annotated[RequestContext, Depends(get_request_context)],
    dedup: Annotated[InteractionDedupService, Depends(get_dedup_service)],
) -> InteractionResponse:
    counted = await dedup.record_view_if_new(slug, context)
    return InteractionResponse(slug=slug, action="view", counted=counted)


@router.post("/{slug}/like", response_model=InteractionResponse)
@limit_interactions
async def record_like(
    request: Request,
    slug: SlugPath,
    context: Annotated[RequestContext, Depends(get_request_context)],
    dedup: Annotated[InteractionDedupService, Depends(get_dedup_service)],
) -> InteractionResponse:
    counted = await dedup.record_like_if_new(slug, context)
    return InteractionResponse(slug=slug, action="like", counted=counted)
