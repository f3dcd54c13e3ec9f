"""Tests for the credential store repository and password hasher."""

from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from src.cityrun.exceptions import ConflictError, StoreUnavailableError
from src.cityrun.services.auth.passwords import PasswordHasher
from src.cityrun.services.auth.repository import UserRepository


@pytest.fixture
def mock_db() -> MagicMock:
    """Mock SupabaseQueryBuilder."""
    return MagicMock()


@pytest.fixture
def repository(mock_db: MagicMock) -> UserRepository:
    """UserRepository over the mock query builder."""
    return UserRepository(mock_db, table="users")


@pytest.fixture
def user_row() -> dict:
    """Sample users row."""
    return {
        "id": 1,
        "email": "runner@example.com",
        "password_hash": "$2b$04$abcdefghijklmnopqrstuu",
        "display_name": "Runner",
        "created_at": "2026-10-01T08:30:00+00:00",
    }


class TestUserRepository:
    """Tests for UserRepository."""

    def test_get_by_email_found(self, repository: UserRepository, mock_db: MagicMock, user_row: dict) -> None:
        """Test lookup by email maps the row to a User."""
        mock_db.get_by_field.return_value = user_row

        user = repository.get_by_email("runner@example.com")

        assert user is not None
        assert user.id == 1
        assert user.display_name == "Runner"
        mock_db.get_by_field.assert_called_once_with("users", "email", "runner@example.com")

    def test_get_by_email_missing(self, repository: UserRepository, mock_db: MagicMock) -> None:
        """Test lookup by unknown email returns None."""
        mock_db.get_by_field.return_value = None

        assert repository.get_by_email("nobody@example.com") is None

    def test_insert_returns_user(self, repository: UserRepository, mock_db: MagicMock, user_row: dict) -> None:
        """Test insert sends hash and display name and returns the stored row."""
        mock_db.insert_record.return_value = user_row

        user = repository.insert("runner@example.com", "$2b$04$hash", "Runner")

        assert user.id == 1
        mock_db.insert_record.assert_called_once_with(
            "users",
            {"email": "runner@example.com", "password_hash": "$2b$04$hash", "display_name": "Runner"},
        )

    def test_insert_unique_violation_raises_conflict(
        self, repository: UserRepository, mock_db: MagicMock
    ) -> None:
        """Test a racing duplicate insert surfaces as ConflictError."""
        mock_db.insert_record.side_effect = APIError(
            {"message": "duplicate key value", "code": "23505", "details": None, "hint": None}
        )

        with pytest.raises(ConflictError):
            repository.insert("runner@example.com", "$2b$04$hash", "Runner")

    def test_insert_other_api_error_propagates(self, repository: UserRepository, mock_db: MagicMock) -> None:
        """Test unrelated database errors are not disguised as conflicts."""
        mock_db.insert_record.side_effect = APIError(
            {"message": "permission denied", "code": "42501", "details": None, "hint": None}
        )

        with pytest.raises(APIError):
            repository.insert("runner@example.com", "$2b$04$hash", "Runner")

    def test_transport_error_raises_store_unavailable(
        self, repository: UserRepository, mock_db: MagicMock
    ) -> None:
        """Test an unreachable credential store is reported as StoreUnavailableError."""
        mock_db.get_by_field.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(StoreUnavailableError):
            repository.get_by_email("runner@example.com")

    def test_update_display_name(self, repository: UserRepository, mock_db: MagicMock, user_row: dict) -> None:
        """Test profile update writes only the display name."""
        mock_db.update_record.return_value = {**user_row, "display_name": "Speedy"}

        user = repository.update_display_name(1, "Speedy")

        assert user is not None
        assert user.display_name == "Speedy"
        mock_db.update_record.assert_called_once_with("users", 1, {"display_name": "Speedy"})


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_and_verify(self, password_hasher: PasswordHasher) -> None:
        """Test a password verifies against its own hash only."""
        stored = password_hasher.hash("correct horse")

        assert password_hasher.verify("correct horse", stored) is True
        assert password_hasher.verify("wrong horse", stored) is False

    def test_hashes_are_salted(self, password_hasher: PasswordHasher) -> None:
        """Test hashing the same password twice yields different hashes."""
        assert password_hasher.hash("same") != password_hasher.hash("same")

    def test_unrecognised_hash_is_mismatch(self, password_hasher: PasswordHasher) -> None:
        """Test a corrupt stored hash is a mismatch rather than a crash."""
        assert password_hasher.verify("anything", "not-a-hash") is False
