"""Health check endpoints. Used for liveness and readiness probes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_store
from app.infrastructure.cache import KeyValueStore
from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(
    store: Annotated[KeyValueStore, Depends(get_store)],
) -> ReadinessResponse:
    """Report whether the key-value store is connected.

    Always 200: without the store every component runs on its fallback.
    """
    if store.is_available():
        return ReadinessResponse()
    return ReadinessResponse(status="degraded", store="down")
