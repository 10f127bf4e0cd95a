"""Vote-related schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class VoteResponse(BaseModel):
    """Schema for a recorded vote."""

    id: int = Field(..., description="Vote ID")
    user_id: int = Field(..., description="Voter ID")
    entry_id: int = Field(..., description="Target entry ID")
    created_at: datetime = Field(..., description="Vote timestamp")

    model_config = {"from_attributes": True}


class VoteResultResponse(BaseModel):
    """Response for casting or withdrawing a vote."""

    success: bool = True
    message: str
    entry_id: int
    new_vote_count: int = Field(..., ge=0, description="Entry vote count after the change")
