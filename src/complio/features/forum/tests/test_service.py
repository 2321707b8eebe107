"""Tests for forum read helpers."""

from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

from src.complio.features.forum.service import (
    extract_mentions,
    fetch_author,
    mark_post_interactions,
    search_filter,
    with_authors,
)


def admin_user(user_id: str, email: str | None = "author@example.com") -> SimpleNamespace:
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id, email=email, user_metadata={"full_name": "Author"})
    )


class TestAuthors:
    def test_fetch_author_reads_admin_api(self):
        client = MagicMock()
        client.auth.admin.get_user_by_id.return_value = admin_user("u1")

        assert fetch_author(client, "u1") == {
            "id": "u1",
            "email": "author@example.com",
            "raw_user_meta_data": {"full_name": "Author"},
        }
        client.auth.admin.get_user_by_id.assert_called_once_with("u1")

    def test_fetch_author_falls_back_on_error(self):
        client = MagicMock()
        client.auth.admin.get_user_by_id.side_effect = Exception("User not found")

        assert fetch_author(client, "u1") == {"id": "u1", "email": None, "raw_user_meta_data": {}}

    def test_with_authors_looks_each_author_up_once(self):
        client = MagicMock()
        client.auth.admin.get_user_by_id.side_effect = lambda uid: admin_user(uid)

        rows = with_authors(
            [{"id": "p1", "user_id": "u1"}, {"id": "p2", "user_id": "u1"}, {"id": "p3", "user_id": "u2"}],
            client,
        )

        assert [row["user"]["id"] for row in rows] == ["u1", "u1", "u2"]
        assert client.auth.admin.get_user_by_id.call_count == 2


class TestInteractions:
    def test_anonymous_posts_are_unchanged(self):
        db = MagicMock()
        posts = [{"id": "p1"}]

        assert mark_post_interactions(db, None, posts) == posts
        db.list_records.assert_not_called()

    def test_no_posts_skips_queries(self):
        db = MagicMock()

        assert mark_post_interactions(db, uuid4(), []) == []
        db.list_records.assert_not_called()

    def test_flags_liked_and_bookmarked(self):
        db = MagicMock()
        db.list_records.side_effect = [[{"post_id": "p2"}], [{"post_id": "p1"}, {"post_id": "p2"}]]

        posts = mark_post_interactions(db, uuid4(), [{"id": "p1"}, {"id": "p2"}])

        assert posts == [
            {"id": "p1", "isLiked": False, "isBookmarked": True},
            {"id": "p2", "isLiked": True, "isBookmarked": True},
        ]


def test_search_filter_strips_filter_syntax():
    assert search_filter("food (truck), permits") == (
        "title.ilike.%food  truck   permits%,content.ilike.%food  truck   permits%"
    )


def test_search_filter_of_only_syntax_is_none():
    assert search_filter(",()") is None


def test_extract_mentions_keeps_first_occurrence_order():
    assert extract_mentions("thanks @sam and @alex, @sam again") == ["sam", "alex"]
