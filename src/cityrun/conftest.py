"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from src.cityrun.exceptions import ConflictError
from src.cityrun.main import app
from src.cityrun.services.auth.models import User
from src.cityrun.services.auth.passwords import PasswordHasher
from src.cityrun.services.auth.service import AuthService
from src.cityrun.services.rate_limiter import limiter
from src.cityrun.services.session_store.models import SessionRecord


class InMemoryUserRepository:
    """Credential store double with the UserRepository interface."""

    def __init__(self) -> None:
        self.rows: dict[int, User] = {}
        self._next_id = 1

    def get_by_email(self, email: str) -> User | None:
        return next((u for u in self.rows.values() if u.email == email), None)

    def get_by_id(self, user_id: int) -> User | None:
        return self.rows.get(user_id)

    def insert(self, email: str, password_hash: str, display_name: str) -> User:
        if self.get_by_email(email) is not None:
            raise ConflictError("Email is already registered")
        user = User(
            id=self._next_id,
            email=email,
            password_hash=password_hash,
            display_name=display_name,
            created_at=datetime.now(UTC),
        )
        self.rows[user.id] = user
        self._next_id += 1
        return user

    def update_display_name(self, user_id: int, display_name: str) -> User | None:
        user = self.rows.get(user_id)
        if user is None:
            return None
        user.display_name = display_name
        return user


class InMemorySessionStore:
    """Session store double with the RedisSessionStore interface."""

    def __init__(self) -> None:
        self.sessions: dict[str, SessionRecord] = {}

    def save(self, session: SessionRecord) -> None:
        self.sessions[session.session_id] = session

    def get(self, session_id: str) -> SessionRecord | None:
        return self.sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def expire(self, session_id: str) -> None:
        """Simulate the store dropping a session when its TTL runs out."""
        self.sessions.pop(session_id, None)

    def close(self) -> None:
        pass


@pytest.fixture(autouse=True)
def disable_rate_limits():
    """Keep slowapi out of the way of functional tests."""
    previous = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = previous


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    """Provide an empty in-memory credential store."""
    return InMemoryUserRepository()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    """Provide an empty in-memory session store."""
    return InMemorySessionStore()


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Provide a bcrypt hasher with the minimum work factor."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def auth_service(
    user_repository: InMemoryUserRepository,
    session_store: InMemorySessionStore,
    password_hasher: PasswordHasher,
) -> AuthService:
    """Provide an AuthService over in-memory stores."""
    return AuthService(
        users=user_repository,
        sessions=session_store,
        hasher=password_hasher,
        session_ttl_seconds=1800,
    )


@pytest.fixture
def client() -> TestClient:
    """
    Provide FastAPI test client for API testing.

    The lifespan is not run, so no Redis, Supabase or geo-engine client is
    created; tests wire collaborators through ``app.dependency_overrides``.

    Example:
        >>> def test_health(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    yield TestClient(app)
    app.dependency_overrides.clear()
