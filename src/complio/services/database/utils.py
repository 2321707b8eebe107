"""Generic database utility functions for Supabase interactions."""

import logging
from typing import Any
from uuid import UUID

from supabase import Client

from src.complio.services.database.connection import get_supabase_admin_client

logger = logging.getLogger(__name__)


class SupabaseQueryBuilder:
    """Helper class for building and executing Supabase queries."""

    def __init__(self, client: Client | None = None) -> None:
        """
        Initialize query builder.

        Args:
            client: Supabase client instance (uses admin client if None)
        """
        self.client = client or get_supabase_admin_client()

    def get_by_field(
        self, table: str, field: str, value: Any, columns: str = "*"
    ) -> dict[str, Any] | None:
        """
        Fetch a single record by field value.

        Args:
            table: Table name
            field: Field name to filter by
            value: Field value
            columns: Columns to select (default: "*")

        Returns:
            First matching record or None

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> status = builder.get_by_field("onboarding", "user_id", user_id)
        """
        response = self.client.table(table).select(columns).eq(field, value).limit(1).execute()
        return response.data[0] if response.data else None

    def find_one(
        self, table: str, filters: dict[str, Any], columns: str = "*"
    ) -> dict[str, Any] | None:
        """
        Fetch the first record matching every filter.

        Args:
            table: Table name
            filters: Dictionary of field:value pairs (all must match)
            columns: Columns to select (default: "*")

        Returns:
            First matching record or None

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> like = builder.find_one("forum_likes", {"user_id": uid, "post_id": pid}, "id")
        """
        query = self.client.table(table).select(columns)

        for field, value in filters.items():
            query = query.eq(field, value)

        response = query.limit(1).execute()
        return response.data[0] if response.data else None

    def list_records(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        order_desc: bool = True,
        limit: int | None = None,
        offset: int = 0,
        in_filters: dict[str, list[Any]] | None = None,
        or_filter: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List records with optional filtering, ordering, and pagination.

        Args:
            table: Table name
            columns: Columns to select, may embed foreign tables (default: "*")
            filters: Dictionary of field:value pairs for filtering
            order_by: Column to order by
            order_desc: Order descending (default: True)
            limit: Maximum records to return
            offset: Number of records to skip
            in_filters: Dictionary of field:values pairs, field must be one of values
            or_filter: PostgREST or-expression (e.g. "title.ilike.%x%,content.ilike.%x%")

        Returns:
            List of record dictionaries

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> bookmarks = builder.list_records(
            ...     "forum_bookmarks",
            ...     columns="*, post:post_id (*)",
            ...     filters={"user_id": user_id},
            ...     order_by="created_at",
            ...     limit=20,
            ... )
        """
        query = self.client.table(table).select(columns)

        if filters:
            for field, value in filters.items():
                query = query.eq(field, value)

        if in_filters:
            for field, values in in_filters.items():
                query = query.in_(field, values)

        if or_filter:
            query = query.or_(or_filter)

        if order_by:
            query = query.order(order_by, desc=order_desc)

        if limit is not None:
            query = query.range(offset, offset + limit - 1)

        response = query.execute()
        return response.data

    def insert_record(self, table: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Insert a single record.

        Args:
            table: Table name
            data: Record data dictionary

        Returns:
            Inserted record dictionary or None if nothing was returned

        Raises:
            Exception: If insert operation fails
        """
        response = self.client.table(table).insert(data).execute()
        return response.data[0] if response.data else None

    def upsert_record(
        self, table: str, record: dict[str, Any], conflict_columns: list[str]
    ) -> dict[str, Any]:
        """
        Insert or update a record atomically using PostgreSQL UPSERT.

        Args:
            table: Name of the table
            record: Record data to insert/update
            conflict_columns: Column(s) to check for conflicts (e.g., ["user_id"])

        Returns:
            The inserted or updated record

        Raises:
            Exception: If the operation fails

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> builder.upsert_record(
            ...     "onboarding",
            ...     {"user_id": "123", "current_step": 2, "completed": False},
            ...     conflict_columns=["user_id"]
            ... )
        """
        try:
            result = (
                self.client.table(table)
                .upsert(record, on_conflict=",".join(conflict_columns))
                .execute()
            )
            return result.data[0]
        except Exception as e:
            logger.error(f"Failed to upsert record in {table}: {e}")
            raise

    def update_record(
        self, table: str, record_id: UUID | str, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Update a record by ID.

        Args:
            table: Table name
            record_id: Record UUID or ID
            data: Fields to update

        Returns:
            Updated record dictionary or None if not found

        Example:
            >>> builder = SupabaseQueryBuilder()
            >>> builder.update_record("forum_replies", reply_id, {"status": "deleted"})
        """
        response = self.client.table(table).update(data).eq("id", str(record_id)).execute()
        return response.data[0] if response.data else None

    def delete_record(self, table: str, record_id: UUID | str) -> bool:
        """
        Delete a record by ID.

        Args:
            table: Table name
            record_id: Record UUID or ID

        Returns:
            True if deleted, False if not found
        """
        response = self.client.table(table).delete().eq("id", str(record_id)).execute()
        return len(response.data) > 0


def get_query_builder(client: Client | None = None) -> SupabaseQueryBuilder:
    """
    Get instance of SupabaseQueryBuilder.

    Args:
        client: Optional Supabase client (uses admin client if None)

    Returns:
        SupabaseQueryBuilder instance

    Example:
        >>> db = get_query_builder()
        >>> prefs = db.get_by_field("notification_preferences", "user_id", user_id)
    """
    return SupabaseQueryBuilder(client or get_supabase_admin_client())
