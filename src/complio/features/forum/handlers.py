"""API handlers for forum likes, bookmarks and follows."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from src.complio.features.forum.models import (
    BookmarkedPostsResponse,
    BookmarkToggleRequest,
    BookmarkToggleResponse,
    FollowDirection,
    FollowListResponse,
    FollowToggleRequest,
    FollowToggleResponse,
    LikeToggleRequest,
    LikeToggleResponse,
)
from src.complio.features.forum.service import FOLLOWS_TABLE, PUBLISHED
from src.complio.services.auth.dependencies import get_current_user
from src.complio.services.auth.models import AuthUser
from src.complio.services.database import get_query_builder
from src.complio.services.rate_limiter import default_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forum", tags=["forum"])


@router.post("/likes", response_model=LikeToggleResponse, response_model_exclude_none=True)
@write_rate_limit
async def toggle_like(
    request: Request,
    req: LikeToggleRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> LikeToggleResponse:
    """
    Toggle the current user's like on a post or a reply.

    An existing like is removed; otherwise a new one is created.

    Raises:
        HTTPException: 400 if neither or both of postId/replyId are given
        HTTPException: 500 if the like cannot be created or removed
    """
    if not req.post_id and not req.reply_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either postId or replyId is required",
        )
    if req.post_id and req.reply_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot like both post and reply",
        )

    target_field, target_id = ("post_id", req.post_id) if req.post_id else ("reply_id", req.reply_id)
    db = get_query_builder()

    try:
        existing = db.find_one(
            "forum_likes",
            filters={"user_id": str(current_user.id), target_field: target_id},
            columns="id",
        )
    except Exception as e:
        logger.error(f"Error looking up like for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    if existing:
        try:
            db.delete_record("forum_likes", existing["id"])
        except Exception as e:
            logger.error(f"Error removing like {existing['id']}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to remove like",
            ) from e

        logger.info(f"User {current_user.id} unliked {target_field}={target_id}")
        return LikeToggleResponse(liked=False)

    try:
        like = db.insert_record(
            "forum_likes",
            {
                "user_id": str(current_user.id),
                "post_id": req.post_id,
                "reply_id": req.reply_id,
            },
        )
    except Exception as e:
        logger.error(f"Error creating like for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create like",
        ) from e

    logger.info(f"User {current_user.id} liked {target_field}={target_id}")
    return LikeToggleResponse(liked=True, like=like)


@router.get("/bookmarks", response_model=BookmarkedPostsResponse)
@default_rate_limit
async def list_bookmarks(
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Maximum bookmarks to return"),
    offset: int = Query(0, ge=0, description="Number of bookmarks to skip"),
    current_user: AuthUser = Depends(get_current_user),
) -> BookmarkedPostsResponse:
    """
    List the posts the current user bookmarked.

    Bookmarks whose post is gone or not published are left out.

    Raises:
        HTTPException: 500 if database query fails
    """
    try:
        db = get_query_builder()
        bookmarks = db.list_records(
            "forum_bookmarks",
            columns="*, post:post_id (*)",
            filters={"user_id": str(current_user.id)},
            order_by="created_at",
            order_desc=True,
            limit=limit,
            offset=offset,
        )
    except Exception as e:
        logger.error(f"Error fetching bookmarks for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch bookmarks",
        ) from e

    posts = [
        bookmark["post"]
        for bookmark in bookmarks or []
        if bookmark.get("post") and bookmark["post"].get("status") == PUBLISHED
    ]
    return BookmarkedPostsResponse(posts=posts)


@router.post(
    "/bookmarks", response_model=BookmarkToggleResponse, response_model_exclude_none=True
)
@write_rate_limit
async def toggle_bookmark(
    request: Request,
    req: BookmarkToggleRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> BookmarkToggleResponse:
    """
    Toggle the current user's bookmark on a post.

    Raises:
        HTTPException: 400 if postId is missing
        HTTPException: 500 if the bookmark cannot be created or removed
    """
    if not req.post_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post ID is required",
        )

    db = get_query_builder()

    try:
        existing = db.find_one(
            "forum_bookmarks",
            filters={"user_id": str(current_user.id), "post_id": req.post_id},
            columns="id",
        )
    except Exception as e:
        logger.error(f"Error looking up bookmark for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    if existing:
        try:
            db.delete_record("forum_bookmarks", existing["id"])
        except Exception as e:
            logger.error(f"Error removing bookmark {existing['id']}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to remove bookmark",
            ) from e
        return BookmarkToggleResponse(bookmarked=False)

    try:
        bookmark = db.insert_record(
            "forum_bookmarks",
            {"user_id": str(current_user.id), "post_id": req.post_id},
        )
    except Exception as e:
        logger.error(f"Error creating bookmark for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create bookmark",
        ) from e

    return BookmarkToggleResponse(bookmarked=True, bookmark=bookmark)


@router.get("/follows", response_model=FollowListResponse)
@default_rate_limit
async def list_follows(
    request: Request,
    direction: FollowDirection = Query(FollowDirection.FOLLOWING, alias="type"),
    user_id: str | None = Query(None, alias="userId", description="Defaults to the caller"),
    current_user: AuthUser = Depends(get_current_user),
) -> FollowListResponse:
    """
    List who a user follows, or who follows them.

    Each row carries the other user embedded under `following` or `follower`.

    Raises:
        HTTPException: 500 if database query fails
    """
    subject_id = user_id or str(current_user.id)

    if direction is FollowDirection.FOLLOWING:
        columns = "*, following:following_id (id, email, raw_user_meta_data)"
        subject_field = "follower_id"
    else:
        columns = "*, follower:follower_id (id, email, raw_user_meta_data)"
        subject_field = "following_id"

    try:
        users = get_query_builder().list_records(
            FOLLOWS_TABLE,
            columns=columns,
            filters={subject_field: subject_id},
        )
    except Exception as e:
        logger.error(f"Error fetching {direction.value} for user {subject_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch {direction.value}",
        ) from e

    return FollowListResponse(users=users or [])


@router.post("/follows", response_model=FollowToggleResponse, response_model_exclude_none=True)
@write_rate_limit
async def toggle_follow(
    request: Request,
    req: FollowToggleRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> FollowToggleResponse:
    """
    Follow or unfollow another user.

    Raises:
        HTTPException: 400 if followingId is missing or names the caller
        HTTPException: 500 if the follow cannot be created or removed
    """
    if not req.following_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Following ID is required",
        )
    if req.following_id == str(current_user.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot follow yourself",
        )

    db = get_query_builder()
    pair = {"follower_id": str(current_user.id), "following_id": req.following_id}

    try:
        existing = db.find_one(FOLLOWS_TABLE, filters=pair, columns="id")
    except Exception as e:
        logger.error(f"Error looking up follow for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    if existing:
        try:
            db.delete_record(FOLLOWS_TABLE, existing["id"])
        except Exception as e:
            logger.error(f"Error removing follow {existing['id']}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to remove follow",
            ) from e

        logger.info(f"User {current_user.id} unfollowed {req.following_id}")
        return FollowToggleResponse(following=False)

    try:
        follow = db.insert_record(FOLLOWS_TABLE, pair)
    except Exception as e:
        logger.error(f"Error creating follow for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create follow",
        ) from e

    logger.info(f"User {current_user.id} followed {req.following_id}")
    return FollowToggleResponse(following=True, follow=follow)
