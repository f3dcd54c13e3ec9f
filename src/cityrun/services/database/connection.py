"""Supabase database connection management."""

from functools import lru_cache

from supabase import Client, create_client

from src.cityrun.config import settings


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """
    Get Supabase admin client with service role key (singleton pattern).

    The credential store is only ever touched by this server, which performs
    its own session-based authorization, so the service role key is used and
    Row-Level Security is bypassed.

    Returns:
        Configured Supabase client with service role key

    Example:
        >>> client = get_supabase_admin_client()
        >>> response = client.table("users").select("id").eq("email", email).execute()
    """
    return create_client(settings.supabase_url, settings.supabase_service_role_key)
