"""Database connection and query helpers."""

from src.cityrun.services.database.connection import get_supabase_admin_client
from src.cityrun.services.database.utils import SupabaseQueryBuilder, database_call, get_query_builder

__all__ = [
    "get_supabase_admin_client",
    "SupabaseQueryBuilder",
    "database_call",
    "get_query_builder",
]
