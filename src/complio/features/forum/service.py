"""Forum read helpers: author lookup and per-user interaction flags."""

import logging
import re
from typing import Any
from uuid import UUID

from supabase import Client

from src.complio.services.database import SupabaseQueryBuilder, get_supabase_admin_client

logger = logging.getLogger(__name__)

POSTS_TABLE = "forum_posts"
REPLIES_TABLE = "forum_replies"
LIKES_TABLE = "forum_likes"
BOOKMARKS_TABLE = "forum_bookmarks"
FOLLOWS_TABLE = "forum_follows"

PUBLISHED = "published"
DELETED = "deleted"

# Characters with meaning inside a PostgREST or-expression
_FILTER_SYNTAX = re.compile(r"[,()]")
_MENTION = re.compile(r"@(\w+)")


def anonymous_author(user_id: str | None) -> dict[str, Any]:
    return {"id": user_id, "email": None, "raw_user_meta_data": {}}


def fetch_author(client: Client, user_id: str | None) -> dict[str, Any]:
    """
    Public author info for a post or reply.

    Falls back to an id-only author when the user cannot be read, so a
    missing account never hides the content.
    """
    if not user_id:
        return anonymous_author(user_id)

    try:
        response = client.auth.admin.get_user_by_id(str(user_id))
    except Exception as e:
        logger.warning(f"Could not fetch author {user_id}: {e}")
        return anonymous_author(user_id)

    user = getattr(response, "user", None)
    if user is None:
        return anonymous_author(user_id)

    return {
        "id": str(user.id),
        "email": user.email,
        "raw_user_meta_data": user.user_metadata or {},
    }


def with_authors(rows: list[dict[str, Any]], client: Client | None = None) -> list[dict[str, Any]]:
    """Attach a `user` author object to each row, looking each author up once."""
    client = client or get_supabase_admin_client()
    authors: dict[str, dict[str, Any]] = {}

    enriched = []
    for row in rows:
        user_id = row.get("user_id")
        if user_id not in authors:
            authors[user_id] = fetch_author(client, user_id)
        enriched.append({**row, "user": authors[user_id]})
    return enriched


def search_filter(term: str) -> str | None:
    """Case-insensitive title/content match as a PostgREST or-expression."""
    cleaned = _FILTER_SYNTAX.sub(" ", term).strip()
    if not cleaned:
        return None
    return f"title.ilike.%{cleaned}%,content.ilike.%{cleaned}%"


def interacted_ids(
    db: SupabaseQueryBuilder, table: str, user_id: UUID, field: str, ids: list[str]
) -> set[str]:
    """Which of ids the user has a row for in table (likes or bookmarks)."""
    if not ids:
        return set()

    rows = db.list_records(
        table,
        columns=field,
        filters={"user_id": str(user_id)},
        in_filters={field: ids},
    )
    return {row[field] for row in rows or [] if row.get(field)}


def mark_post_interactions(
    db: SupabaseQueryBuilder, user_id: UUID | None, posts: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """
    Add isLiked/isBookmarked flags for a signed-in user.

    Anonymous readers get the posts back unchanged.
    """
    if user_id is None:
        return posts

    post_ids = [post["id"] for post in posts if post.get("id")]
    liked = interacted_ids(db, LIKES_TABLE, user_id, "post_id", post_ids)
    bookmarked = interacted_ids(db, BOOKMARKS_TABLE, user_id, "post_id", post_ids)

    return [
        {**post, "isLiked": post.get("id") in liked, "isBookmarked": post.get("id") in bookmarked}
        for post in posts
    ]


def extract_mentions(content: str) -> list[str]:
    """@handles mentioned in a reply, in order of first appearance."""
    return list(dict.fromkeys(_MENTION.findall(content)))
