"""Entry-related schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class EntryResponse(BaseModel):
    """Schema for entry data in responses."""

    id: int = Field(..., description="Entry ID")
    name: str = Field(..., description="Entry name")
    description: str = Field(..., description="Entry description")
    image_url: str | None = Field(None, description="Absolute URL of the entry image")
    votes: int = Field(..., description="Number of votes")
    user_id: int = Field(..., description="Owning user ID")
    creator: str | None = Field(None, description="Owner's username")
    created_at: datetime = Field(..., description="Creation timestamp")


class EntryCreatedResponse(BaseModel):
    """Response for entry creation."""

    message: str
    entry: EntryResponse


class EntryDeleteResponse(BaseModel):
    """Response for entry deletion."""

    message: str
    entry_id: int
    removed_vote_ids: list[int] = Field(default_factory=list)
    media_failures: list[str] = Field(
        default_factory=list,
        description="Media references that could not be removed from disk"
    )
