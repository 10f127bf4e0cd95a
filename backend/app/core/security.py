"""Credential hashing and identity tokens."""

from datetime import datetime, timedelta, timezone
from typing import Protocol

import bcrypt
from jose import JWTError, jwt

from backend.app.core.config import settings
from backend.app.core.exceptions import ReasonCode, UnauthorizedError

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher(Protocol):
    """One-way password hash + verify."""

    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        ...


class BcryptPasswordHasher:
    """bcrypt-backed hasher, compatible with ``$2a$``/``$2b$`` hashes."""

    def __init__(self, rounds: int | None = None):
        self.rounds = rounds or settings.bcrypt_rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False


class TokenService:
    """Issue and verify signed JWTs carrying the user id in ``sub``."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expiration_hours: int | None = None,
    ):
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expiration_hours = expiration_hours or settings.jwt_expiration_hours

    def issue(self, user_id: int, **claims) -> str:
        """Create a signed JWT with an expiry claim."""
        to_encode = dict(claims)
        expire = datetime.now(timezone.utc) + timedelta(hours=self.expiration_hours)
        to_encode.update({"sub": str(user_id), "exp": expire})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """
        Decode a token and return the user id it asserts.

        Raises:
            UnauthorizedError: If the token is malformed, expired or has no subject
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            user_id = int(payload.get("sub") or 0)
        except (JWTError, ValueError, TypeError):
            user_id = 0

        if not user_id:
            raise UnauthorizedError(
                message="Invalid token",
                reason=ReasonCode.INVALID_TOKEN,
                details="The access token is malformed or has expired"
            )
        return user_id
