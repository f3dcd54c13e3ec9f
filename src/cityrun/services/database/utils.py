"""Generic database utility functions for Supabase interactions."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx
from supabase import Client

from src.cityrun.exceptions import StoreUnavailableError
from src.cityrun.services.database.connection import get_supabase_admin_client

logger = logging.getLogger(__name__)


@contextmanager
def database_call(operation: str) -> Iterator[None]:
    """Translate PostgREST transport failures into StoreUnavailableError."""
    try:
        yield
    except httpx.HTTPError as e:
        logger.error(
            f"Database unavailable during {operation}: {e}",
            extra={"error_type": "database_unavailable", "operation": operation},
        )
        raise StoreUnavailableError("Database is unavailable") from e


class SupabaseQueryBuilder:
    """
    Thin wrapper over the PostgREST table API used by the repositories.

    Every method returns plain row dictionaries; mapping rows onto models is
    the caller's job. Transport failures surface as ``httpx`` errors, which
    callers wrap in ``database_call``.
    """

    def __init__(self, client: Client | None = None) -> None:
        self.client = client or get_supabase_admin_client()

    def get_by_id(self, table: str, record_id: int | str, columns: str = "*") -> dict[str, Any] | None:
        """
        Fetch the row whose ``id`` equals ``record_id``.

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> route = builder.get_by_id("user_routes", 7)
        """
        response = self.client.table(table).select(columns).eq("id", record_id).execute()
        return response.data[0] if response.data else None

    def get_by_field(
        self, table: str, field: str, value: Any, columns: str = "*"
    ) -> dict[str, Any] | None:
        """
        Fetch the first row where ``field`` equals ``value``.

        Meant for unique columns such as ``users.email``.

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> user = builder.get_by_field("users", "email", "runner@example.com")
        """
        response = self.client.table(table).select(columns).eq(field, value).limit(1).execute()
        return response.data[0] if response.data else None

    def list_records(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        order_desc: bool = True,
    ) -> list[dict[str, Any]]:
        """
        List rows matching every equality filter.

        Args:
            table: Table name
            columns: Columns to select (default: "*")
            filters: ``{column: value}`` pairs combined with AND
            order_by: Column to sort on
            order_desc: Sort newest/largest first (default: True)

        Returns:
            Matching rows, possibly empty
        """
        query = self.client.table(table).select(columns)

        for field, value in (filters or {}).items():
            query = query.eq(field, value)

        if order_by:
            query = query.order(order_by, desc=order_desc)

        return query.execute().data

    def insert_record(self, table: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Insert one row and return it as stored (with generated columns).

        Raises:
            postgrest.exceptions.APIError: If the insert violates a constraint
        """
        response = self.client.table(table).insert(data).execute()
        return response.data[0] if response.data else None

    def update_record(
        self, table: str, record_id: int | str, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Patch the row with ``id == record_id``; None if no row matched."""
        response = self.client.table(table).update(data).eq("id", record_id).execute()
        return response.data[0] if response.data else None

    def delete_record(self, table: str, record_id: int | str) -> bool:
        """Delete the row with ``id == record_id``; False if no row matched."""
        response = self.client.table(table).delete().eq("id", record_id).execute()
        return len(response.data) > 0


def get_query_builder(client: Client | None = None) -> SupabaseQueryBuilder:
    """
    Build a query builder over ``client`` or the shared admin client.

    Example:
        >>> db = get_query_builder()
        >>> user = db.get_by_field("users", "email", email)
    """
    return SupabaseQueryBuilder(client or get_supabase_admin_client())
