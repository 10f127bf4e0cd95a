"""Vote model."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Vote(BaseModel):
    """
    Vote model representing a user's vote on another user's entry.

    Attributes:
        id: Unique vote identifier
        user_id: Voting user ID
        entry_id: Target entry ID
        origin_address: Network address the vote came from
        created_at: Creation timestamp
    """

    id: int = 0
    user_id: int
    entry_id: int
    origin_address: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<Vote(id={self.id}, user_id={self.user_id}, entry_id={self.entry_id})>"
