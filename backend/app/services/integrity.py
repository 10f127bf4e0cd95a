"""
Contest integrity rules.

Each check is a pure function over the current collections. It returns
``None`` when the mutation is allowed and a ``Rejection`` otherwise. Checks
never raise and never mutate; the contest service decides what to do with a
rejection (normally ``rejection.raise_()``).

Rules enforced:
- registration only for the organisational email domain, unique email and username
- only live accounts create entries or cast and withdraw votes
- at most one entry per user
- at most one vote per (voter, entry) pair, never on one's own entry
- only the owner deletes an entry, only the account holder deletes an account
"""

from dataclasses import dataclass

from backend.app.core.exceptions import (
    ContestException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ReasonCode,
    UnauthorizedError,
    ValidationError,
)
from backend.app.db.repositories import EntryRepository, UserRepository, VoteRepository
from backend.app.models.entry import Entry
from backend.app.models.user import User


@dataclass(frozen=True)
class Rejection:
    """Why a mutation was refused."""

    kind: type[ContestException]
    reason: ReasonCode
    message: str

    def to_exception(self) -> ContestException:
        return self.kind(message=self.message, reason=self.reason)

    def raise_(self) -> None:
        raise self.to_exception()


def email_in_domain(email: str, domain: str) -> bool:
    """Check that an email address ends with ``@<domain>`` (case-insensitive)."""
    return email.strip().lower().endswith("@" + domain.strip().lstrip("@").lower())


def check_registration(
    email: str,
    username: str,
    users: UserRepository,
    allowed_domain: str,
) -> Rejection | None:
    """Validate a registration request against domain and uniqueness rules."""
    if not email_in_domain(email, allowed_domain):
        return Rejection(
            ValidationError,
            ReasonCode.DOMAIN_NOT_ALLOWED,
            f"Registration is only allowed for @{allowed_domain} email addresses",
        )
    if users.find_by_email(email):
        return Rejection(
            ConflictError,
            ReasonCode.EMAIL_TAKEN,
            "An account with this email address already exists",
        )
    if users.find_by_username(username):
        return Rejection(ConflictError, ReasonCode.USERNAME_TAKEN, "This username is already taken")
    return None


def check_actor(user: User | None) -> Rejection | None:
    """The acting account must still exist when the mutation runs."""
    if user is None:
        return Rejection(UnauthorizedError, ReasonCode.INVALID_TOKEN, "Your account no longer exists")
    return None


def check_entry_creation(user_id: int, entries: EntryRepository) -> Rejection | None:
    """A user may own at most one entry."""
    if entries.find_by_owner(user_id):
        return Rejection(
            ConflictError,
            ReasonCode.ENTRY_ALREADY_EXISTS,
            "You can only submit one entry per user",
        )
    return None


def check_vote(user_id: int, entry: Entry | None, votes: VoteRepository) -> Rejection | None:
    """Validate casting a vote for ``entry``."""
    if entry is None:
        return Rejection(NotFoundError, ReasonCode.ENTRY_NOT_FOUND, "Entry not found")
    if entry.user_id == user_id:
        return Rejection(ForbiddenError, ReasonCode.SELF_VOTE, "You cannot vote for your own entry")
    if votes.find(user_id, entry.id):
        return Rejection(ConflictError, ReasonCode.ALREADY_VOTED, "You have already voted for this entry")
    return None


def check_vote_withdrawal(user_id: int, entry: Entry | None, votes: VoteRepository) -> Rejection | None:
    """Validate withdrawing a vote from ``entry``."""
    if entry is None:
        return Rejection(NotFoundError, ReasonCode.ENTRY_NOT_FOUND, "Entry not found")
    if votes.find(user_id, entry.id) is None:
        return Rejection(NotFoundError, ReasonCode.VOTE_NOT_FOUND, "You have not voted for this entry")
    return None


def check_entry_deletion(requester_id: int, entry: Entry | None) -> Rejection | None:
    """Only the owner may delete an entry."""
    if entry is None:
        return Rejection(NotFoundError, ReasonCode.ENTRY_NOT_FOUND, "Entry not found")
    if entry.user_id != requester_id:
        return Rejection(ForbiddenError, ReasonCode.NOT_ENTRY_OWNER, "You can only delete your own entry")
    return None


def check_account_deletion(requester_id: int, user_id: int, user: User | None) -> Rejection | None:
    """Only the account holder may delete an account."""
    if requester_id != user_id:
        return Rejection(
            ForbiddenError,
            ReasonCode.NOT_ACCOUNT_HOLDER,
            "You can only delete your own account",
        )
    if user is None:
        return Rejection(NotFoundError, ReasonCode.USER_NOT_FOUND, "User not found")
    return None
