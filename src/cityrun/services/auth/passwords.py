"""Password hashing with bcrypt via passlib."""

import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)


class PasswordHasher:
    """
    Slow, salted one-way password hashing.

    Wraps a passlib ``CryptContext`` so the work factor is chosen by the
    owner (production settings vs. fast test rounds) instead of a module
    global.

    Example:
        >>> hasher = PasswordHasher(rounds=12)
        >>> stored = hasher.hash("correct horse")
        >>> hasher.verify("correct horse", stored)
        True
    """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Verify a password against its stored hash.

        A stored hash passlib cannot identify is treated as a mismatch.
        """
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            logger.warning("Stored password hash is not a recognised bcrypt hash")
            return False

    def dummy_verify(self) -> None:
        """Spend one verification's worth of time against a throwaway hash."""
        self._context.dummy_verify()
