"""Pydantic models for the community forum."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LikeToggleRequest(BaseModel):
    """Target of a like: exactly one of a post or a reply."""

    model_config = ConfigDict(populate_by_name=True)

    post_id: str | None = Field(None, alias="postId")
    reply_id: str | None = Field(None, alias="replyId")


class LikeToggleResponse(BaseModel):
    """State of the like after the toggle."""

    liked: bool
    like: dict[str, Any] | None = None


class BookmarkToggleRequest(BaseModel):
    """Post to bookmark or unbookmark."""

    model_config = ConfigDict(populate_by_name=True)

    post_id: str | None = Field(None, alias="postId")


class BookmarkToggleResponse(BaseModel):
    """State of the bookmark after the toggle."""

    bookmarked: bool
    bookmark: dict[str, Any] | None = None


class BookmarkedPostsResponse(BaseModel):
    """Published posts the user bookmarked, newest bookmark first."""

    posts: list[dict[str, Any]]


class PostSortField(str, Enum):
    """Columns the post listing can be ordered by, always descending."""

    LAST_ACTIVITY_AT = "last_activity_at"
    CREATED_AT = "created_at"
    VIEW_COUNT = "view_count"
    LIKE_COUNT = "like_count"
    REPLY_COUNT = "reply_count"


class PostCreateRequest(BaseModel):
    """
    New forum post.

    Title and content are checked in the handler so a blank value answers
    400 with the same message as a missing one.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    content: str | None = None
    industry: str | None = None
    business_model: str | None = Field(None, alias="businessModel")
    customer_demographic: str | None = Field(None, alias="customerDemographic")
    weekly_customers: str | None = Field(None, alias="weeklyCustomers")
    board: str | None = None
    images: list[str] = Field(default_factory=list)


class PostUpdateRequest(BaseModel):
    """Partial post update: only fields present in the body are written."""

    title: str | None = None
    content: str | None = None
    board: str | None = None
    images: list[str] | None = None


class PostResponse(BaseModel):
    post: dict[str, Any]


class PostListResponse(BaseModel):
    posts: list[dict[str, Any]]


class PostDetailResponse(BaseModel):
    """A post with its published replies, oldest first."""

    post: dict[str, Any]
    replies: list[dict[str, Any]]


class ReplyCreateRequest(BaseModel):
    """Reply to a post, optionally nested under another reply of that post."""

    model_config = ConfigDict(populate_by_name=True)

    post_id: str | None = Field(None, alias="postId")
    content: str | None = None
    parent_reply_id: str | None = Field(None, alias="parentReplyId")


class ReplyUpdateRequest(BaseModel):
    content: str | None = None


class ReplyResponse(BaseModel):
    reply: dict[str, Any]


class DeleteResponse(BaseModel):
    success: bool = True


class FollowDirection(str, Enum):
    """Which side of the follow relation to list."""

    FOLLOWING = "following"
    FOLLOWERS = "followers"


class FollowToggleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    following_id: str | None = Field(None, alias="followingId")


class FollowToggleResponse(BaseModel):
    """State of the follow after the toggle."""

    following: bool
    follow: dict[str, Any] | None = None


class FollowListResponse(BaseModel):
    users: list[dict[str, Any]]
