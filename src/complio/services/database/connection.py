"""Supabase client construction."""

from functools import lru_cache

from supabase import Client, create_client

from src.complio.config import settings


def create_supabase_client() -> Client:
    """
    Create a fresh Supabase client with the anon key.

    Each call returns a new client with its own in-memory session storage, so a
    session established through it (code exchange, OTP verification) stays
    scoped to the caller. Used once per confirmation request.

    Returns:
        New Supabase client with anon key
    """
    return create_client(settings.supabase_url, settings.supabase_anon_key)


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """
    Get Supabase admin client with service role key (singleton pattern).

    This client bypasses Row-Level Security (RLS) policies. Every query made
    through it must filter on the authenticated user's id itself.

    Returns:
        Configured Supabase client with service role key (bypasses RLS)

    Example:
        >>> client = get_supabase_admin_client()
        >>> response = client.table("onboarding").select("*").eq("user_id", uid).execute()
    """
    return create_client(settings.supabase_url, settings.supabase_service_role_key)
