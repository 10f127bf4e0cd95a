"""Custom exception classes for the contest application."""

from enum import Enum


class ReasonCode(str, Enum):
    """Stable, machine-readable cause attached to every rejection."""

    # Registration / identity
    DOMAIN_NOT_ALLOWED = "DOMAIN_NOT_ALLOWED"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Tokens
    TOKEN_REQUIRED = "TOKEN_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Entries
    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    ENTRY_ALREADY_EXISTS = "ENTRY_ALREADY_EXISTS"
    NOT_ENTRY_OWNER = "NOT_ENTRY_OWNER"

    # Votes
    SELF_VOTE = "SELF_VOTE"
    ALREADY_VOTED = "ALREADY_VOTED"
    VOTE_NOT_FOUND = "VOTE_NOT_FOUND"

    # Accounts / admin
    NOT_ACCOUNT_HOLDER = "NOT_ACCOUNT_HOLDER"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"

    # Uploads
    INVALID_IMAGE_TYPE = "INVALID_IMAGE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    # Persistence
    STORAGE_FAILURE = "STORAGE_FAILURE"


class ContestException(Exception):
    """Base exception for all contest-specific errors."""

    def __init__(self, message: str, reason: ReasonCode, details: str | None = None):
        self.message = message
        self.reason = reason
        self.details = details
        super().__init__(self.message)


class ValidationError(ContestException):
    """Raised when input is malformed or violates a registration rule."""


class ConflictError(ContestException):
    """Raised when a uniqueness or one-per-user invariant would be violated."""


class NotFoundError(ContestException):
    """Raised when a referenced user, entry or vote does not exist."""


class UnauthorizedError(ContestException):
    """Raised when the identity assertion is missing or invalid."""


class ForbiddenError(ContestException):
    """Raised when an authenticated user is not permitted to perform an action."""


class StorageError(ContestException):
    """Raised when a collection cannot be read from or written to its backing file."""

    def __init__(self, collection: str, operation: str, original_error: Exception | None = None):
        message = f"Storage error during {operation} of '{collection}'"
        if original_error:
            message += f": {str(original_error)}"
        super().__init__(
            message=message,
            reason=ReasonCode.STORAGE_FAILURE,
            details="The contest data could not be persisted"
        )
        self.collection = collection
        self.operation = operation
        self.original_error = original_error
