"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready.

    The service stays ready without the key-value store (every component
    has a fallback), so a missing store reports "degraded" rather than 503.
    """

    status: str = Field(default="ok", description="ok or degraded")
    store: str = Field(default="up", description="Key-value store: up or down")
