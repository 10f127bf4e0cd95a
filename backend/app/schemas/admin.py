"""Admin schemas."""

from pydantic import BaseModel, Field


class ClearResponse(BaseModel):
    """Response for admin clear operations."""

    message: str
    removed_entries: int = 0
    removed_votes: int = 0


class OriginResponse(BaseModel):
    """An origin address recorded for a user, entry or vote."""

    kind: str = Field(..., description="'user', 'entry' or 'vote'")
    record_id: int
    user_id: int
    origin_address: str | None = None

    model_config = {"from_attributes": True}
