"""Entry model."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Entry(BaseModel):
    """
    Entry model representing a user's single contest submission.

    Attributes:
        id: Unique entry identifier
        name: Entry name
        description: Entry description
        image_ref: Media store reference of the uploaded image, if any
        votes: Cached number of votes cast for this entry
        user_id: Owning user ID (one entry per user)
        origin_address: Network address the submission came from
        created_at: Creation timestamp
    """

    id: int = 0
    name: str
    description: str
    image_ref: str | None = None
    votes: int = Field(default=0, ge=0)
    user_id: int
    origin_address: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, name={self.name}, user_id={self.user_id}, votes={self.votes})>"
