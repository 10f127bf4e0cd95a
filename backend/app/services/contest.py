"""
Contest service: every mutation and query of the contest.

Each mutation follows the same path:

1. take the mutation locks of the collections it touches
2. resolve the actor and target records
3. run the integrity check, raising the rejection if there is one
4. mutate the in-memory collections (cascading for deletions)
5. flush the touched collections to the store

A ``StorageError`` raised in step 5 propagates to the caller. The in-memory
mutation stays applied and reaches disk with the next successful flush.
"""

import logging
from dataclasses import dataclass

from backend.app.core.config import settings
from backend.app.core.exceptions import NotFoundError, ReasonCode, UnauthorizedError
from backend.app.core.security import BcryptPasswordHasher, PasswordHasher, TokenService
from backend.app.db.base import ENTRIES, USERS, VOTES, ContestDatabase, get_db
from backend.app.models.entry import Entry
from backend.app.models.user import User
from backend.app.models.vote import Vote
from backend.app.services import integrity
from backend.app.services.cascade import CascadeCoordinator, CascadeReport
from backend.app.services.media import MediaStore

logger = logging.getLogger(__name__)


@dataclass
class OriginRecord:
    """An audited origin address and what it was recorded for."""

    kind: str
    record_id: int
    user_id: int
    origin_address: str | None


class ContestService:
    """Orchestrates identity, entries and votes over a ``ContestDatabase``."""

    def __init__(
        self,
        db: ContestDatabase,
        media: MediaStore,
        hasher: PasswordHasher | None = None,
        tokens: TokenService | None = None,
        allowed_email_domain: str | None = None,
    ):
        self.db = db
        self.media = media
        self.hasher = hasher or BcryptPasswordHasher()
        self.tokens = tokens or TokenService()
        self.allowed_email_domain = allowed_email_domain or settings.allowed_email_domain
        self.cascade = CascadeCoordinator(db, media)

    # Identity

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        origin_address: str | None = None,
    ) -> User:
        """Register a new user in the organisational domain."""
        async with self.db.locked(USERS):
            rejection = integrity.check_registration(
                email, username, self.db.users, self.allowed_email_domain
            )
            if rejection:
                logger.info(f"[REGISTER] Rejected {username!r}: {rejection.reason.value}")
                rejection.raise_()

            user = self.db.users.create(
                User(
                    username=username,
                    email=email.strip(),
                    password_hash=self.hasher.hash(password),
                    origin_address=origin_address,
                )
            )
            self.db.flush(USERS)

        logger.info(f"[REGISTER] Registered user {user.id} ({user.username})")
        return user

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and issue a token."""
        user = self.db.users.find_by_email(email)
        if user is None or not self.hasher.verify(password, user.password_hash):
            raise UnauthorizedError(message="Invalid credentials", reason=ReasonCode.INVALID_CREDENTIALS)

        logger.info(f"[LOGIN] User {user.id} logged in")
        return user, self.issue_token(user)

    def issue_token(self, user: User) -> str:
        return self.tokens.issue(user.id, username=user.username, email=user.email)

    def authenticate(self, token: str) -> User:
        """Resolve a token to a live user."""
        user = self.db.users.find_by_id(self.tokens.verify(token))
        if user is None:
            # Token outlived its account
            raise UnauthorizedError(message="Invalid token", reason=ReasonCode.INVALID_TOKEN)
        return user

    # Entries

    async def create_entry(
        self,
        user_id: int,
        name: str,
        description: str,
        image_ref: str | None = None,
        origin_address: str | None = None,
    ) -> Entry:
        """
        Create the user's entry.

        If the entry is rejected, an image already stored for it is deleted
        so that no orphaned upload remains.
        """
        async with self.db.locked(USERS, ENTRIES):
            actor = self.db.users.find_by_id(user_id)
            rejection = integrity.check_actor(actor) or integrity.check_entry_creation(user_id, self.db.entries)
            if rejection:
                logger.info(f"[CREATE-ENTRY] Rejected for user {user_id}: {rejection.reason.value}")
                if image_ref:
                    self.cascade.discard_media(image_ref)
                rejection.raise_()

            entry = self.db.entries.create(
                Entry(
                    name=name,
                    description=description,
                    image_ref=image_ref,
                    user_id=user_id,
                    origin_address=origin_address,
                )
            )
            self.db.flush(ENTRIES)

        logger.info(f"[CREATE-ENTRY] User {user_id} created entry {entry.id} ({entry.name})")
        return entry

    async def delete_entry(self, requester_id: int, entry_id: int) -> CascadeReport:
        """Delete an entry owned by the requester, with its image and votes."""
        logger.info(f"[DELETE-ENTRY] Request to delete entry {entry_id} by user {requester_id}")

        async with self.db.locked(ENTRIES, VOTES):
            entry = self.db.entries.find_by_id(entry_id)
            rejection = integrity.check_entry_deletion(requester_id, entry)
            if rejection:
                rejection.raise_()

            report = self.cascade.delete_entry(entry)
            self.db.flush(ENTRIES, VOTES)

        logger.info(f"[DELETE-ENTRY] Successfully deleted entry {entry_id}")
        return report

    # Votes

    async def cast_vote(self, user_id: int, entry_id: int, origin_address: str | None = None) -> int:
        """Vote for an entry and return its new vote count."""
        async with self.db.locked(USERS, ENTRIES, VOTES):
            entry = self.db.entries.find_by_id(entry_id)
            actor = self.db.users.find_by_id(user_id)
            rejection = integrity.check_actor(actor) or integrity.check_vote(user_id, entry, self.db.votes)
            if rejection:
                logger.info(f"[VOTE] User {user_id} rejected for entry {entry_id}: {rejection.reason.value}")
                rejection.raise_()

            self.db.votes.create(Vote(user_id=user_id, entry_id=entry_id, origin_address=origin_address))
            entry.votes += 1
            self.db.flush(ENTRIES, VOTES)

        logger.info(f"[VOTE] User {user_id} voted for entry {entry_id} (now {entry.votes})")
        return entry.votes

    async def withdraw_vote(self, user_id: int, entry_id: int) -> int:
        """Remove the user's vote from an entry and return its new vote count."""
        async with self.db.locked(USERS, ENTRIES, VOTES):
            entry = self.db.entries.find_by_id(entry_id)
            actor = self.db.users.find_by_id(user_id)
            rejection = integrity.check_actor(actor) or integrity.check_vote_withdrawal(user_id, entry, self.db.votes)
            if rejection:
                rejection.raise_()

            vote = self.db.votes.find(user_id, entry_id)
            self.db.votes.remove(vote.id)
            entry.votes = max(0, entry.votes - 1)
            self.db.flush(ENTRIES, VOTES)

        logger.info(f"[UNVOTE] User {user_id} removed vote from entry {entry_id} (now {entry.votes})")
        return entry.votes

    # Accounts

    async def delete_account(self, requester_id: int, user_id: int) -> CascadeReport:
        """Delete an account with its entry, the votes on it and every vote it cast."""
        async with self.db.locked(USERS, ENTRIES, VOTES):
            user = self.db.users.find_by_id(user_id)
            rejection = integrity.check_account_deletion(requester_id, user_id, user)
            if rejection:
                rejection.raise_()

            report = self.cascade.delete_account(user)
            self.db.flush(USERS, ENTRIES, VOTES)

        logger.info(f"[DELETE-ACCOUNT] Deleted user {user_id}")
        return report

    # Queries

    def list_entries(self) -> list[tuple[Entry, str]]:
        """All entries in creation order, each with its creator's username."""
        results = []
        for entry in sorted(self.db.entries.all(), key=lambda e: e.id):
            creator = self.db.users.find_by_id(entry.user_id)
            results.append((entry, creator.username if creator else "Unknown"))
        return results

    def get_user(self, user_id: int) -> tuple[User, Entry | None]:
        """A user together with the entry they own, if any."""
        user = self.db.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(message="User not found", reason=ReasonCode.USER_NOT_FOUND)
        return user, self.db.entries.find_by_owner(user_id)

    def list_votes_by_user(self, user_id: int) -> list[Vote]:
        return sorted(self.db.votes.by_user(user_id), key=lambda v: v.id)

    # Administration

    async def clear_entries(self) -> CascadeReport:
        """Delete every entry, its image and every vote."""
        async with self.db.locked(ENTRIES, VOTES):
            report = self.cascade.clear_entries()
            self.db.flush(ENTRIES, VOTES)
        logger.warning(f"[ADMIN] Cleared {len(report.removed_entry_ids)} entries")
        return report

    async def clear_votes(self) -> CascadeReport:
        """Delete every vote and reset all counters."""
        async with self.db.locked(ENTRIES, VOTES):
            report = self.cascade.clear_votes()
            self.db.flush(ENTRIES, VOTES)
        logger.warning(f"[ADMIN] Cleared {len(report.removed_vote_ids)} votes")
        return report

    async def clear_all(self) -> CascadeReport:
        """Delete every entry and vote (users are kept)."""
        return await self.clear_entries()

    def list_origins(self) -> list[OriginRecord]:
        """Origin addresses recorded for registrations, entries and votes."""
        records = [OriginRecord("user", u.id, u.id, u.origin_address) for u in self.db.users.all()]
        records += [OriginRecord("entry", e.id, e.user_id, e.origin_address) for e in self.db.entries.all()]
        records += [OriginRecord("vote", v.id, v.user_id, v.origin_address) for v in self.db.votes.all()]
        return records


_contest_service: ContestService | None = None


def get_contest_service() -> ContestService:
    """Get or create the global contest service instance."""
    global _contest_service
    if _contest_service is None:
        _contest_service = ContestService(get_db(), MediaStore())
    return _contest_service


def reset_contest_service() -> None:
    global _contest_service
    _contest_service = None
