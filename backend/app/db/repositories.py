"""
In-memory repositories over the contest collections.

The repositories hold the live records and answer lookups. They never touch
the store and never cascade: removing a user leaves that user's entry and
votes in place until the caller (the cascade coordinator) removes them.
"""

from typing import Iterable

from backend.app.models.entry import Entry
from backend.app.models.user import User
from backend.app.models.vote import Vote


class IdAllocator:
    """
    Hand out strictly increasing integer ids.

    Seeded with the highest id present at load time. Ids released by deletion
    are never handed out again by the same allocator.
    """

    def __init__(self, last_id: int = 0):
        self.last_id = last_id

    @classmethod
    def from_ids(cls, ids: Iterable[int]) -> "IdAllocator":
        return cls(max(ids, default=0))

    def next_id(self) -> int:
        self.last_id += 1
        return self.last_id


class UserRepository:
    """Identity registry: users keyed by id with email/username lookups."""

    def __init__(self, users: Iterable[User] = ()):
        self._users: dict[int, User] = {user.id: user for user in users}
        self._ids = IdAllocator.from_ids(self._users)

    def all(self) -> list[User]:
        return list(self._users.values())

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._users.values() if u.email.lower() == email), None)

    def find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def create(self, user: User) -> User:
        """Append a user, assigning the next id."""
        user.id = self._ids.next_id()
        self._users[user.id] = user
        return user

    def remove(self, user_id: int) -> User | None:
        return self._users.pop(user_id, None)

    def clear(self) -> None:
        self._users.clear()

    def __len__(self) -> int:
        return len(self._users)


class EntryRepository:
    """Contest entries keyed by id."""

    def __init__(self, entries: Iterable[Entry] = ()):
        self._entries: dict[int, Entry] = {entry.id: entry for entry in entries}
        self._ids = IdAllocator.from_ids(self._entries)

    def all(self) -> list[Entry]:
        return list(self._entries.values())

    def find_by_id(self, entry_id: int) -> Entry | None:
        return self._entries.get(entry_id)

    def find_by_owner(self, user_id: int) -> Entry | None:
        return next((e for e in self._entries.values() if e.user_id == user_id), None)

    def create(self, entry: Entry) -> Entry:
        entry.id = self._ids.next_id()
        self._entries[entry.id] = entry
        return entry

    def remove(self, entry_id: int) -> Entry | None:
        return self._entries.pop(entry_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class VoteRepository:
    """Votes keyed by id, indexed by (voter, entry)."""

    def __init__(self, votes: Iterable[Vote] = ()):
        self._votes: dict[int, Vote] = {vote.id: vote for vote in votes}
        self._ids = IdAllocator.from_ids(self._votes)

    def all(self) -> list[Vote]:
        return list(self._votes.values())

    def find(self, user_id: int, entry_id: int) -> Vote | None:
        return next(
            (v for v in self._votes.values() if v.user_id == user_id and v.entry_id == entry_id),
            None,
        )

    def by_user(self, user_id: int) -> list[Vote]:
        return [v for v in self._votes.values() if v.user_id == user_id]

    def by_entry(self, entry_id: int) -> list[Vote]:
        return [v for v in self._votes.values() if v.entry_id == entry_id]

    def count_for_entry(self, entry_id: int) -> int:
        return sum(1 for v in self._votes.values() if v.entry_id == entry_id)

    def create(self, vote: Vote) -> Vote:
        vote.id = self._ids.next_id()
        self._votes[vote.id] = vote
        return vote

    def remove(self, vote_id: int) -> Vote | None:
        return self._votes.pop(vote_id, None)

    def remove_by_entry(self, entry_id: int) -> list[Vote]:
        """Remove every vote targeting an entry and return them."""
        removed = self.by_entry(entry_id)
        for vote in removed:
            del self._votes[vote.id]
        return removed

    def remove_by_user(self, user_id: int) -> list[Vote]:
        """Remove every vote cast by a user and return them."""
        removed = self.by_user(user_id)
        for vote in removed:
            del self._votes[vote.id]
        return removed

    def clear(self) -> None:
        self._votes.clear()

    def __len__(self) -> int:
        return len(self._votes)
