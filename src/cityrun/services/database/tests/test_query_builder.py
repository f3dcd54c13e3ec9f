"""Tests for database utility functions."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.cityrun.exceptions import StoreUnavailableError
from src.cityrun.services.database.utils import (
    SupabaseQueryBuilder,
    database_call,
    get_query_builder,
)


@pytest.fixture
def mock_client() -> MagicMock:
    """Mock Supabase client."""
    return MagicMock()


class TestSupabaseQueryBuilder:
    """Tests for SupabaseQueryBuilder class."""

    def test_get_by_id_found(self, mock_client: MagicMock) -> None:
        """Test getting record by ID when it exists."""
        mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [
            {"id": 7, "name": "Morning loop"}
        ]

        builder = SupabaseQueryBuilder(mock_client)
        result = builder.get_by_id("user_routes", 7)

        assert result is not None
        assert result["id"] == 7
        mock_client.table.assert_called_once_with("user_routes")
        mock_client.table.return_value.select.return_value.eq.assert_called_once_with("id", 7)

    def test_get_by_id_not_found(self, mock_client: MagicMock) -> None:
        """Test getting record by ID when it doesn't exist."""
        mock_client.table().select().eq().execute.return_value.data = []

        builder = SupabaseQueryBuilder(mock_client)
        result = builder.get_by_id("user_routes", 999)

        assert result is None

    def test_get_by_field_found(self, mock_client: MagicMock) -> None:
        """Test getting record by field value."""
        mock_client.table().select().eq().limit().execute.return_value.data = [
            {"id": 1, "email": "runner@example.com"}
        ]

        builder = SupabaseQueryBuilder(mock_client)
        result = builder.get_by_field("users", "email", "runner@example.com")

        assert result is not None
        assert result["email"] == "runner@example.com"

    def test_get_by_field_not_found(self, mock_client: MagicMock) -> None:
        """Test getting record by field value when nothing matches."""
        mock_client.table().select().eq().limit().execute.return_value.data = []

        builder = SupabaseQueryBuilder(mock_client)

        assert builder.get_by_field("users", "email", "nobody@example.com") is None

    def test_list_records_with_filters_and_order(self, mock_client: MagicMock) -> None:
        """Test listing records with filters and ordering."""
        mock_client.table.return_value.select.return_value.eq.return_value.order.return_value.execute.return_value.data = [
            {"id": 2, "user_id": 1},
            {"id": 1, "user_id": 1},
        ]

        builder = SupabaseQueryBuilder(mock_client)
        results = builder.list_records("user_routes", filters={"user_id": 1}, order_by="id")

        assert [r["id"] for r in results] == [2, 1]
        mock_client.table.return_value.select.return_value.eq.return_value.order.assert_called_once_with(
            "id", desc=True
        )

    def test_insert_record(self, mock_client: MagicMock) -> None:
        """Test inserting a record returns the stored row."""
        mock_client.table().insert().execute.return_value.data = [
            {"id": 1, "email": "runner@example.com"}
        ]

        builder = SupabaseQueryBuilder(mock_client)
        result = builder.insert_record("users", {"email": "runner@example.com"})

        assert result == {"id": 1, "email": "runner@example.com"}

    def test_update_record_not_found(self, mock_client: MagicMock) -> None:
        """Test updating a missing record returns None."""
        mock_client.table().update().eq().execute.return_value.data = []

        builder = SupabaseQueryBuilder(mock_client)

        assert builder.update_record("users", 1, {"display_name": "x"}) is None

    def test_delete_record(self, mock_client: MagicMock) -> None:
        """Test deleting a record."""
        mock_client.table().delete().eq().execute.return_value.data = [{"id": 3}]

        builder = SupabaseQueryBuilder(mock_client)

        assert builder.delete_record("user_routes", 3) is True


def test_get_query_builder_uses_admin_client() -> None:
    """Test factory falls back to the admin client."""
    with patch("src.cityrun.services.database.utils.get_supabase_admin_client") as mock_admin:
        mock_admin.return_value = MagicMock()
        builder = get_query_builder()

    assert builder.client is mock_admin.return_value


def test_database_call_translates_transport_errors() -> None:
    """Test PostgREST transport failures become StoreUnavailableError."""
    with pytest.raises(StoreUnavailableError):
        with database_call("list_routes"):
            raise httpx.ReadTimeout("timed out")


def test_database_call_passes_other_errors_through() -> None:
    """Test non-transport errors are not disguised as outages."""
    with pytest.raises(KeyError):
        with database_call("list_routes"):
            raise KeyError("id")
