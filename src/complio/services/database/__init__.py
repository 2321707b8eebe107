"""Database connection and query helpers."""

from src.complio.services.database.connection import (
    create_supabase_client,
    get_supabase_admin_client,
)
from src.complio.services.database.utils import SupabaseQueryBuilder, get_query_builder

__all__ = [
    "create_supabase_client",
    "get_supabase_admin_client",
    "SupabaseQueryBuilder",
    "get_query_builder",
]
