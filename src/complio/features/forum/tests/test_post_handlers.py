"""Tests for forum post and reply handlers."""

from unittest.mock import patch

import pytest

from src.complio.main import app
from src.complio.services.auth.dependencies import get_optional_user

HANDLERS = "src.complio.features.forum.post_handlers"


def author_of(row):
    return {"id": row.get("user_id"), "email": None, "raw_user_meta_data": {}}


@pytest.fixture
def mock_db():
    with patch(f"{HANDLERS}.get_query_builder") as mock:
        yield mock.return_value


@pytest.fixture(autouse=True)
def mock_authors():
    """Author lookups return id-only authors instead of calling the admin API."""
    with patch(f"{HANDLERS}.get_supabase_admin_client"), patch(
        f"{HANDLERS}.with_authors",
        side_effect=lambda rows, client=None: [{**row, "user": author_of(row)} for row in rows],
    ), patch(
        f"{HANDLERS}.fetch_author",
        side_effect=lambda client, user_id: {"id": user_id, "email": f"{user_id}@example.com"},
    ) as fetch_author:
        yield fetch_author


@pytest.fixture(autouse=True)
def mock_posthog():
    with patch(f"{HANDLERS}.PostHogService") as mock:
        yield mock.return_value


@pytest.fixture
def mock_notify():
    with patch(f"{HANDLERS}.record_forum_notification") as mock:
        yield mock


@pytest.fixture
def reader_client(client, test_user):
    """Client whose optional-auth endpoints see test_user as signed in."""
    app.dependency_overrides[get_optional_user] = lambda: test_user
    yield client
    app.dependency_overrides = {}


class TestListPosts:
    """Tests for GET /api/forum/posts."""

    def test_anonymous_reader_gets_published_posts_with_authors(self, client, mock_db):
        mock_db.list_records.return_value = [{"id": "p1", "user_id": "u1", "status": "published"}]

        response = client.get("/api/forum/posts")

        assert response.status_code == 200
        assert response.json() == {
            "posts": [
                {
                    "id": "p1",
                    "user_id": "u1",
                    "status": "published",
                    "user": {"id": "u1", "email": None, "raw_user_meta_data": {}},
                }
            ]
        }
        call = mock_db.list_records.call_args
        assert call.args == ("forum_posts",)
        assert call.kwargs["filters"] == {"status": "published"}
        assert call.kwargs["order_by"] == "last_activity_at"
        assert call.kwargs["order_desc"] is True
        assert call.kwargs["limit"] == 20
        assert call.kwargs["offset"] == 0
        assert call.kwargs["or_filter"] is None

    def test_filters_search_and_sort(self, client, mock_db):
        mock_db.list_records.return_value = []

        client.get(
            "/api/forum/posts",
            params={
                "board": "general",
                "industry": "food",
                "businessModel": "b2c",
                "search": "permit",
                "sortBy": "reply_count",
                "limit": 5,
                "offset": 10,
            },
        )

        kwargs = mock_db.list_records.call_args.kwargs
        assert kwargs["filters"] == {
            "status": "published",
            "board": "general",
            "industry": "food",
            "business_model": "b2c",
        }
        assert kwargs["or_filter"] == "title.ilike.%permit%,content.ilike.%permit%"
        assert kwargs["order_by"] == "reply_count"
        assert (kwargs["limit"], kwargs["offset"]) == (5, 10)

    def test_unknown_sort_is_rejected(self, client, mock_db):
        response = client.get("/api/forum/posts", params={"sortBy": "title; drop table"})

        assert response.status_code == 422
        mock_db.list_records.assert_not_called()

    def test_signed_in_reader_gets_interaction_flags(self, reader_client, mock_db, test_user):
        mock_db.list_records.side_effect = [
            [{"id": "p1", "user_id": "u1"}, {"id": "p2", "user_id": "u2"}],
            [{"post_id": "p1"}],
            [{"post_id": "p2"}],
        ]

        response = reader_client.get("/api/forum/posts")

        posts = response.json()["posts"]
        assert [(p["isLiked"], p["isBookmarked"]) for p in posts] == [(True, False), (False, True)]
        likes_call = mock_db.list_records.call_args_list[1]
        assert likes_call.args == ("forum_likes",)
        assert likes_call.kwargs["filters"] == {"user_id": str(test_user.id)}
        assert likes_call.kwargs["in_filters"] == {"post_id": ["p1", "p2"]}

    def test_failure_returns_500(self, client, mock_db):
        mock_db.list_records.side_effect = Exception("timeout")

        response = client.get("/api/forum/posts")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch posts"


class TestCreatePost:
    """Tests for POST /api/forum/posts."""

    def test_creates_published_post(self, client_with_auth, mock_db, mock_posthog, test_user):
        mock_db.insert_record.return_value = {"id": "p1", "title": "Permits"}

        response = client_with_auth.post(
            "/api/forum/posts",
            json={
                "title": "  Permits  ",
                "content": " Which permits do I need? ",
                "businessModel": "b2c",
                "board": "general",
            },
        )

        assert response.status_code == 201
        assert response.json() == {"post": {"id": "p1", "title": "Permits"}}
        table, record = mock_db.insert_record.call_args.args
        assert table == "forum_posts"
        assert record["user_id"] == str(test_user.id)
        assert record["title"] == "Permits"
        assert record["content"] == "Which permits do I need?"
        assert record["business_model"] == "b2c"
        assert record["images"] == []
        assert record["status"] == "published"
        assert record["view_count"] == 1
        mock_posthog.track_post_created.assert_called_once_with(test_user.id, "p1", "general")

    @pytest.mark.parametrize("body", [{}, {"title": "x"}, {"title": "   ", "content": "body"}])
    def test_requires_title_and_content(self, client_with_auth, mock_db, body):
        response = client_with_auth.post("/api/forum/posts", json=body)

        assert response.status_code == 400
        assert response.json()["detail"] == "Title and content are required"
        mock_db.insert_record.assert_not_called()

    def test_insert_failure_returns_500(self, client_with_auth, mock_db):
        mock_db.insert_record.side_effect = Exception("denied")

        response = client_with_auth.post("/api/forum/posts", json={"title": "t", "content": "c"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to create post"

    def test_requires_auth(self, client):
        assert client.post("/api/forum/posts", json={"title": "t", "content": "c"}).status_code == 401


class TestGetPost:
    """Tests for GET /api/forum/posts/{post_id}."""

    def test_returns_post_with_replies_and_counts_view(self, client, mock_db):
        mock_db.find_one.return_value = {"id": "p1", "user_id": "u1", "view_count": 4}
        mock_db.list_records.return_value = [{"id": "r1", "user_id": "u2"}]

        response = client.get("/api/forum/posts/p1")

        assert response.status_code == 200
        body = response.json()
        assert body["post"]["view_count"] == 5
        assert body["post"]["user"] == {"id": "u1", "email": "u1@example.com"}
        assert body["replies"] == [
            {"id": "r1", "user_id": "u2", "user": {"id": "u2", "email": None, "raw_user_meta_data": {}}}
        ]
        mock_db.find_one.assert_called_once_with(
            "forum_posts", filters={"id": "p1", "status": "published"}
        )
        mock_db.update_record.assert_called_once_with("forum_posts", "p1", {"view_count": 5})
        replies_call = mock_db.list_records.call_args
        assert replies_call.kwargs["filters"] == {"post_id": "p1", "status": "published"}
        assert replies_call.kwargs["order_desc"] is False

    def test_missing_post_returns_404(self, client, mock_db):
        mock_db.find_one.return_value = None

        response = client.get("/api/forum/posts/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Post not found"

    def test_view_count_failure_still_returns_post(self, client, mock_db):
        mock_db.find_one.return_value = {"id": "p1", "user_id": "u1", "view_count": 4}
        mock_db.update_record.side_effect = Exception("conflict")
        mock_db.list_records.return_value = []

        response = client.get("/api/forum/posts/p1")

        assert response.status_code == 200
        assert response.json()["post"]["view_count"] == 4

    def test_signed_in_reader_gets_flags(self, reader_client, mock_db):
        mock_db.find_one.side_effect = [
            {"id": "p1", "user_id": "u1", "view_count": 0},
            {"id": "like-1"},
            None,
        ]
        mock_db.list_records.side_effect = [
            [{"id": "r1", "user_id": "u2"}, {"id": "r2", "user_id": "u2"}],
            [{"reply_id": "r2"}],
        ]

        body = reader_client.get("/api/forum/posts/p1").json()

        assert body["post"]["isLiked"] is True
        assert body["post"]["isBookmarked"] is False
        assert [r["isLiked"] for r in body["replies"]] == [False, True]


class TestUpdateAndDeletePost:
    """Tests for PUT and DELETE /api/forum/posts/{post_id}."""

    def test_owner_updates_given_fields(self, client_with_auth, mock_db, test_user):
        mock_db.find_one.return_value = {"id": "p1", "user_id": str(test_user.id)}
        mock_db.update_record.return_value = {"id": "p1", "title": "New"}

        response = client_with_auth.put("/api/forum/posts/p1", json={"title": " New ", "board": "ops"})

        assert response.status_code == 200
        assert response.json() == {"post": {"id": "p1", "title": "New"}}
        mock_db.update_record.assert_called_once_with(
            "forum_posts", "p1", {"title": "New", "board": "ops"}
        )

    def test_other_users_post_is_not_found(self, client_with_auth, mock_db):
        mock_db.find_one.return_value = {"id": "p1", "user_id": "someone-else"}

        response = client_with_auth.put("/api/forum/posts/p1", json={"title": "New"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Post not found or unauthorized"
        mock_db.update_record.assert_not_called()

    def test_update_failure_returns_500(self, client_with_auth, mock_db, test_user):
        mock_db.find_one.return_value = {"id": "p1", "user_id": str(test_user.id)}
        mock_db.update_record.side_effect = Exception("denied")

        response = client_with_auth.put("/api/forum/posts/p1", json={"content": "x"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to update post"

    def test_owner_deletes_post(self, client_with_auth, mock_db, test_user):
        mock_db.find_one.return_value = {"id": "p1", "user_id": str(test_user.id)}

        response = client_with_auth.delete("/api/forum/posts/p1")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        mock_db.delete_record.assert_called_once_with("forum_posts", "p1")

    def test_delete_missing_post_is_not_found(self, client_with_auth, mock_db):
        mock_db.find_one.return_value = None

        response = client_with_auth.delete("/api/forum/posts/p1")

        assert response.status_code == 404
        mock_db.delete_record.assert_not_called()


class TestReplies:
    """Tests for /api/forum/replies."""

    def test_creates_reply_and_notifies_post_author(
        self, client_with_auth, mock_db, mock_notify, mock_posthog, test_user
    ):
        mock_db.find_one.return_value = {"id": "p1", "user_id": "author-1"}
        mock_db.insert_record.return_value = {"id": "r1", "content": "Thanks @sam"}

        response = client_with_auth.post(
            "/api/forum/replies", json={"postId": "p1", "content": " Thanks @sam "}
        )

        assert response.status_code == 201
        reply = response.json()["reply"]
        assert reply["id"] == "r1"
        assert reply["user"]["id"] == str(test_user.id)
        assert reply["user"]["email"] == "owner@example.com"
        record = mock_db.insert_record.call_args.args[1]
        assert record == {
            "post_id": "p1",
            "user_id": str(test_user.id),
            "content": "Thanks @sam",
            "parent_reply_id": None,
            "status": "published",
        }
        mock_notify.assert_called_once_with(
            mock_db,
            "author-1",
            "reply",
            {"postId": "p1", "replyId": "r1", "actorUserId": str(test_user.id)},
            fallback_email="author-1@example.com",
        )
        mock_posthog.track_reply_created.assert_called_once_with(test_user.id, "p1", nested=False)

    def test_own_post_reply_sends_no_notification(self, client_with_auth, mock_db, mock_notify, test_user):
        mock_db.find_one.return_value = {"id": "p1", "user_id": str(test_user.id)}
        mock_db.insert_record.return_value = {"id": "r1"}

        client_with_auth.post("/api/forum/replies", json={"postId": "p1", "content": "bump"})

        mock_notify.assert_not_called()

    def test_notification_failure_does_not_fail_reply(self, client_with_auth, mock_db, mock_notify):
        mock_db.find_one.return_value = {"id": "p1", "user_id": "author-1"}
        mock_db.insert_record.return_value = {"id": "r1"}
        mock_notify.side_effect = Exception("preferences unavailable")

        response = client_with_auth.post("/api/forum/replies", json={"postId": "p1", "content": "hi"})

        assert response.status_code == 201

    def test_requires_post_and_content(self, client_with_auth, mock_db):
        response = client_with_auth.post("/api/forum/replies", json={"postId": "p1", "content": "  "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Post ID and content are required"

    def test_unpublished_post_is_not_found(self, client_with_auth, mock_db):
        mock_db.find_one.return_value = None

        response = client_with_auth.post("/api/forum/replies", json={"postId": "p1", "content": "hi"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Post not found"

    def test_parent_must_belong_to_post(self, client_with_auth, mock_db, mock_notify):
        mock_db.find_one.side_effect = [{"id": "p1", "user_id": "author-1"}, None]

        response = client_with_auth.post(
            "/api/forum/replies", json={"postId": "p1", "content": "hi", "parentReplyId": "r9"}
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Parent reply not found"
        assert mock_db.find_one.call_args.kwargs["filters"] == {"id": "r9", "post_id": "p1"}
        mock_db.insert_record.assert_not_called()

    def test_owner_edits_reply(self, client_with_auth, mock_db, test_user):
        mock_db.find_one.return_value = {"id": "r1", "user_id": str(test_user.id)}
        mock_db.update_record.return_value = {"id": "r1", "user_id": str(test_user.id), "content": "edited"}

        response = client_with_auth.put("/api/forum/replies/r1", json={"content": " edited "})

        assert response.status_code == 200
        assert response.json()["reply"]["content"] == "edited"
        assert response.json()["reply"]["user"]["id"] == str(test_user.id)
        mock_db.update_record.assert_called_once_with("forum_replies", "r1", {"content": "edited"})

    def test_edit_of_other_users_reply_is_not_found(self, client_with_auth, mock_db):
        mock_db.find_one.return_value = {"id": "r1", "user_id": "someone-else"}

        response = client_with_auth.put("/api/forum/replies/r1", json={"content": "edited"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Reply not found or unauthorized"

    def test_delete_marks_reply_deleted(self, client_with_auth, mock_db, test_user):
        mock_db.find_one.return_value = {"id": "r1", "user_id": str(test_user.id)}

        response = client_with_auth.delete("/api/forum/replies/r1")

        assert response.json() == {"success": True}
        mock_db.update_record.assert_called_once_with("forum_replies", "r1", {"status": "deleted"})
        mock_db.delete_record.assert_not_called()

    def test_delete_failure_returns_500(self, client_with_auth, mock_db, test_user):
        mock_db.find_one.return_value = {"id": "r1", "user_id": str(test_user.id)}
        mock_db.update_record.side_effect = Exception("denied")

        response = client_with_auth.delete("/api/forum/replies/r1")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to delete reply"
