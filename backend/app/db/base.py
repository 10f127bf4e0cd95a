"""Contest database: live collections, mutation locks and persistence."""

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator

from pydantic import BaseModel, ValidationError

from backend.app.core.config import settings
from backend.app.core.exceptions import StorageError
from backend.app.db.repositories import EntryRepository, UserRepository, VoteRepository
from backend.app.db.store import CollectionStore, InMemoryStore, JsonFileStore
from backend.app.models.entry import Entry
from backend.app.models.user import User
from backend.app.models.vote import Vote

logger = logging.getLogger(__name__)

USERS = "users"
ENTRIES = "entries"
VOTES = "votes"

# Lock acquisition order; every mutation takes its locks in this order
COLLECTIONS = (USERS, ENTRIES, VOTES)

# Seed account (password: "password")
DEMO_USER = {
    "id": 1,
    "username": "demo",
    "email": "demo@example.com",
    "password_hash": "$2a$10$92IXUNpkjO0rOQ5byMi.Ye4oKoEa3Ro9llC/.og/at2.uheWG/igi",
    "created_at": "2024-01-01T00:00:00Z",
}


class ContestDatabase:
    """
    In-memory view of the three contest collections backed by a store.

    Mutations are serialized per collection: callers wrap their
    check-then-write sequence in ``locked(...)`` so that two concurrent
    requests can never both pass a uniqueness check before either writes.
    """

    def __init__(self, store: CollectionStore, seed_demo_user: bool = False):
        self.store = store
        self.seed_demo_user = seed_demo_user
        self.users = UserRepository()
        self.entries = EntryRepository()
        self.votes = VoteRepository()
        self._locks = {name: asyncio.Lock() for name in COLLECTIONS}

    def load(self) -> None:
        """Reload every collection from the store."""
        user_seed = [DEMO_USER] if self.seed_demo_user else None
        self.users = UserRepository(self._read(USERS, User, default=user_seed))
        self.entries = EntryRepository(self._read(ENTRIES, Entry))
        self.votes = VoteRepository(self._read(VOTES, Vote))
        logger.info(
            f"[DB] Loaded {len(self.users)} users, {len(self.entries)} entries, {len(self.votes)} votes"
        )

    def _read(self, collection: str, model: type[BaseModel], default: list[dict] | None = None) -> list:
        """Load a collection and validate each record, treating bad records like a corrupt file."""
        try:
            return [model.model_validate(r) for r in self.store.load(collection, default=default)]
        except ValidationError as e:
            raise StorageError(collection, "load", e) from e

    def flush(self, *collections: str) -> None:
        """Write the named collections (all when none given) to the store."""
        repositories = {USERS: self.users, ENTRIES: self.entries, VOTES: self.votes}
        for name in collections or COLLECTIONS:
            records = [record.model_dump(mode="json") for record in repositories[name].all()]
            self.store.save(name, records)

    @asynccontextmanager
    async def locked(self, *collections: str) -> AsyncIterator["ContestDatabase"]:
        """Hold the mutation locks of the given collections."""
        async with AsyncExitStack() as stack:
            for name in COLLECTIONS:
                if name in collections:
                    await stack.enter_async_context(self._locks[name])
            yield self


def create_store() -> CollectionStore:
    """Build the store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        return InMemoryStore()
    return JsonFileStore(settings.data_dir)


_database: ContestDatabase | None = None


def get_db() -> ContestDatabase:
    """Get or create the process-wide contest database."""
    global _database
    if _database is None:
        _database = ContestDatabase(create_store(), seed_demo_user=settings.seed_demo_user)
        _database.load()
    return _database


def reset_db() -> None:
    """Drop the process-wide database so the next ``get_db`` reloads from the store."""
    global _database
    _database = None
