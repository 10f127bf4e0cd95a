"""Contest record models."""

from backend.app.models.user import User
from backend.app.models.entry import Entry
from backend.app.models.vote import Vote

__all__ = ["User", "Entry", "Vote"]
