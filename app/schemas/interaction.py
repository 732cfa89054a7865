"""Article interaction (view/like) schemas."""

from pydantic import BaseModel, Field


class InteractionResponse(BaseModel):
    """Whether the interaction should be counted for this client."""

    slug: str
    action: str = Field(..., description="view or like")
    counted: bool = Field(
        ..., description="True if this is the client's first interaction in the window"
    )
