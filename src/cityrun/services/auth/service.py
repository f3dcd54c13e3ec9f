"""Registration, credential verification and session lifecycle."""

import logging
import secrets
from datetime import UTC, datetime

from src.cityrun.exceptions import ConflictError, ValidationError
from src.cityrun.services.auth.exceptions import InvalidCredentialsError, UnauthenticatedError
from src.cityrun.services.auth.models import User
from src.cityrun.services.auth.passwords import PasswordHasher
from src.cityrun.services.auth.repository import UserRepository
from src.cityrun.services.session_store.models import SessionRecord
from src.cityrun.services.session_store.store import RedisSessionStore

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32

# bcrypt ignores everything past the first 72 bytes
MAX_PASSWORD_BYTES = 72


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email address."""
    return (email or "").strip().lower()


class AuthService:
    """
    Owns the session lifecycle: ``absent -> active (login) -> absent (logout | TTL)``.

    All collaborators are passed in by the owner; nothing is read from
    request-scoped or global state. Every authenticated operation receives
    the session identifier explicitly.

    Attributes:
        users: Credential store repository
        sessions: Shared session store
        hasher: Password hasher
        session_ttl_seconds: Lifetime of a new session, enforced by the store

    Example:
        >>> auth = AuthService(users, sessions, PasswordHasher(), session_ttl_seconds=1800)
        >>> auth.register("runner@example.com", "s3cret", "Runner")
        >>> session = auth.login("runner@example.com", "s3cret")
        >>> auth.validate(session.session_id)
        1
    """

    def __init__(
        self,
        users: UserRepository,
        sessions: RedisSessionStore,
        hasher: PasswordHasher,
        session_ttl_seconds: int,
    ):
        if session_ttl_seconds <= 0:
            raise ValueError(f"session_ttl_seconds must be positive, got {session_ttl_seconds}")

        self.users = users
        self.sessions = sessions
        self.hasher = hasher
        self.session_ttl_seconds = session_ttl_seconds

    def register(self, email: str, password: str, display_name: str | None = None) -> User:
        """
        Create a new user. Does not log the user in.

        Args:
            email: Login email (normalized before storage)
            password: Plaintext password, hashed before storage
            display_name: Optional display name (defaults to the email local part)

        Returns:
            The stored User

        Raises:
            ValidationError: If email or password is blank, or the password
                is longer than MAX_PASSWORD_BYTES in UTF-8
            ConflictError: If the email is already registered
            StoreUnavailableError: If the credential store cannot be reached
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        if not password or not password.strip():
            raise ValidationError("Password is required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        if self.users.get_by_email(email) is not None:
            raise ConflictError("Email is already registered")

        name = (display_name or "").strip() or email.split("@", 1)[0]
        user = self.users.insert(email, self.hasher.hash(password), name)

        logger.info(f"User registered: {user.id}", extra={"user_id": user.id})
        return user

    def login(self, email: str, password: str) -> SessionRecord:
        """
        Verify credentials and issue a new session.

        Concurrent logins for the same user each get an independent session.

        Args:
            email: Login email
            password: Plaintext password

        Returns:
            The issued session; ``session_id`` is the opaque identifier the
            caller hands back to the client

        Raises:
            InvalidCredentialsError: If the email is unknown or the password does not match
            StoreUnavailableError: If either store cannot be reached
        """
        email = normalize_email(email)
        user = self.users.get_by_email(email) if email else None

        if user is None:
            self.hasher.dummy_verify()
            logger.info("Login rejected: unknown email")
            raise InvalidCredentialsError("Invalid email or password")

        if not self.hasher.verify(password or "", user.password_hash):
            logger.info(f"Login rejected: wrong password for user {user.id}")
            raise InvalidCredentialsError("Invalid email or password")

        session = SessionRecord(
            session_id=secrets.token_urlsafe(SESSION_ID_BYTES),
            user_id=user.id,
            email=user.email,
            created_at=datetime.now(UTC),
            ttl_seconds=self.session_ttl_seconds,
        )
        self.sessions.save(session)

        logger.info(
            f"Session issued for user {user.id}",
            extra={"user_id": user.id, "ttl_seconds": self.session_ttl_seconds},
        )
        return session

    def validate(self, session_id: str | None) -> int:
        """
        Resolve a session identifier to its user ID.

        Read-only: the session's TTL is not refreshed.

        Raises:
            UnauthenticatedError: If the identifier is missing, blank, expired or unknown
            StoreUnavailableError: If the session store cannot be reached
        """
        if not session_id or not session_id.strip():
            raise UnauthenticatedError("Login required")

        session = self.sessions.get(session_id.strip())
        if session is None:
            raise UnauthenticatedError("Login required")
        return session.user_id

    def logout(self, session_id: str | None) -> None:
        """
        Destroy a session. Unknown or blank identifiers are ignored.

        Raises:
            StoreUnavailableError: If the session store cannot be reached
        """
        if not session_id or not session_id.strip():
            return

        if self.sessions.delete(session_id.strip()):
            logger.info("Session destroyed")
