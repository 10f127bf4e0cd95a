"""User model."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class User(BaseModel):
    """
    User model representing a registered contest participant.

    Attributes:
        id: Unique user identifier (allocated by the registry)
        username: Unique display name
        email: Unique organisational email address
        password_hash: bcrypt hash of the user's password
        origin_address: Network address the registration came from
        created_at: Registration timestamp
    """

    id: int = 0
    username: str
    email: str
    password_hash: str
    origin_address: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
