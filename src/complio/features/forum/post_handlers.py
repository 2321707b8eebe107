"""API handlers for forum posts and replies."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from src.complio.features.forum.models import (
    DeleteResponse,
    PostCreateRequest,
    PostDetailResponse,
    PostListResponse,
    PostResponse,
    PostSortField,
    PostUpdateRequest,
    ReplyCreateRequest,
    ReplyResponse,
    ReplyUpdateRequest,
)
from src.complio.features.forum.service import (
    BOOKMARKS_TABLE,
    DELETED,
    LIKES_TABLE,
    POSTS_TABLE,
    PUBLISHED,
    REPLIES_TABLE,
    extract_mentions,
    fetch_author,
    interacted_ids,
    mark_post_interactions,
    search_filter,
    with_authors,
)
from src.complio.features.notifications.service import record_forum_notification
from src.complio.services import PostHogService
from src.complio.services.auth.dependencies import get_current_user, get_optional_user
from src.complio.services.auth.models import AuthUser
from src.complio.services.database import get_query_builder, get_supabase_admin_client
from src.complio.services.rate_limiter import default_rate_limit, write_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forum", tags=["forum"])


def _owned_or_404(table: str, record_id: str, user: AuthUser, missing: str) -> dict[str, Any]:
    """Fetch a row's owner and 404 unless it is user, without revealing which case applied."""
    db = get_query_builder()
    try:
        record = db.find_one(table, filters={"id": record_id}, columns="id, user_id")
    except Exception as e:
        logger.error(f"Error looking up {table} {record_id}: {e}")
        record = None

    if not record or record.get("user_id") != str(user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=missing)
    return record


@router.get("/posts", response_model=PostListResponse)
@default_rate_limit
async def list_posts(
    request: Request,
    board: str | None = Query(None),
    industry: str | None = Query(None),
    business_model: str | None = Query(None, alias="businessModel"),
    search: str | None = Query(None, description="Matches title or content"),
    sort_by: PostSortField = Query(PostSortField.LAST_ACTIVITY_AT, alias="sortBy"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: AuthUser | None = Depends(get_optional_user),
) -> PostListResponse:
    """
    List published posts, most active first by default.

    Open to anonymous readers. Signed-in readers also get isLiked and
    isBookmarked on every post.

    Raises:
        HTTPException: 500 if database query fails
    """
    filters: dict[str, Any] = {"status": PUBLISHED}
    if board:
        filters["board"] = board
    if industry:
        filters["industry"] = industry
    if business_model:
        filters["business_model"] = business_model

    db = get_query_builder()
    try:
        posts = db.list_records(
            POSTS_TABLE,
            filters=filters,
            or_filter=search_filter(search) if search else None,
            order_by=sort_by.value,
            order_desc=True,
            limit=limit,
            offset=offset,
        )
        posts = mark_post_interactions(
            db, current_user.id if current_user else None, with_authors(posts or [])
        )
    except Exception as e:
        logger.error(f"Error fetching forum posts: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch posts",
        ) from e

    return PostListResponse(posts=posts)


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
@write_rate_limit
async def create_post(
    request: Request,
    req: PostCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> PostResponse:
    """
    Publish a new post. It starts with one view, its author's.

    Raises:
        HTTPException: 400 if title or content is missing or blank
        HTTPException: 500 if the post cannot be created
    """
    title = (req.title or "").strip()
    content = (req.content or "").strip()
    if not title or not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title and content are required",
        )

    try:
        post = get_query_builder().insert_record(
            POSTS_TABLE,
            {
                "user_id": str(current_user.id),
                "title": title,
                "content": content,
                "industry": req.industry,
                "business_model": req.business_model,
                "customer_demographic": req.customer_demographic,
                "weekly_customers": req.weekly_customers,
                "board": req.board,
                "images": req.images,
                "status": PUBLISHED,
                "view_count": 1,
            },
        )
    except Exception as e:
        logger.error(f"Error creating post for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create post",
        ) from e

    if not post:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create post",
        )

    logger.info(f"User {current_user.id} created post {post.get('id')}")
    PostHogService().track_post_created(current_user.id, post.get("id"), req.board)
    return PostResponse(post=post)


@router.get("/posts/{post_id}", response_model=PostDetailResponse)
@default_rate_limit
async def get_post(
    request: Request,
    post_id: str,
    current_user: AuthUser | None = Depends(get_optional_user),
) -> PostDetailResponse:
    """
    Fetch a published post with its published replies and count the view.

    Raises:
        HTTPException: 404 if the post does not exist or is not published
        HTTPException: 500 if database query fails
    """
    db = get_query_builder()

    try:
        post = db.find_one(POSTS_TABLE, filters={"id": post_id, "status": PUBLISHED})
    except Exception as e:
        logger.error(f"Error fetching post {post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    view_count = (post.get("view_count") or 0) + 1
    try:
        db.update_record(POSTS_TABLE, post_id, {"view_count": view_count})
        post["view_count"] = view_count
    except Exception as e:
        logger.warning(f"Could not count view on post {post_id}: {e}")

    try:
        replies = db.list_records(
            REPLIES_TABLE,
            filters={"post_id": post_id, "status": PUBLISHED},
            order_by="created_at",
            order_desc=False,
        ) or []
    except Exception as e:
        logger.error(f"Error fetching replies for post {post_id}: {e}")
        replies = []

    admin_client = get_supabase_admin_client()
    post = {**post, "user": fetch_author(admin_client, post.get("user_id"))}
    replies = with_authors(replies, admin_client)

    if current_user:
        user_id = str(current_user.id)
        try:
            post["isLiked"] = bool(
                db.find_one(LIKES_TABLE, {"user_id": user_id, "post_id": post_id}, columns="id")
            )
            post["isBookmarked"] = bool(
                db.find_one(BOOKMARKS_TABLE, {"user_id": user_id, "post_id": post_id}, columns="id")
            )
            reply_ids = [reply["id"] for reply in replies if reply.get("id")]
            liked_replies = interacted_ids(db, LIKES_TABLE, current_user.id, "reply_id", reply_ids)
        except Exception as e:
            logger.error(f"Error fetching interactions on post {post_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error",
            ) from e

        replies = [{**reply, "isLiked": reply.get("id") in liked_replies} for reply in replies]

    return PostDetailResponse(post=post, replies=replies)


@router.put("/posts/{post_id}", response_model=PostResponse)
@write_rate_limit
async def update_post(
    request: Request,
    post_id: str,
    req: PostUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> PostResponse:
    """
    Edit the caller's own post. Only fields present in the body change.

    Raises:
        HTTPException: 404 if the post is missing or owned by someone else
        HTTPException: 500 if the update fails
    """
    _owned_or_404(POSTS_TABLE, post_id, current_user, "Post not found or unauthorized")

    updates = req.model_dump(exclude_unset=True)
    for field in ("title", "content"):
        if isinstance(updates.get(field), str):
            updates[field] = updates[field].strip()

    try:
        post = get_query_builder().update_record(POSTS_TABLE, post_id, updates)
    except Exception as e:
        logger.error(f"Error updating post {post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update post",
        ) from e

    if not post:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update post",
        )

    logger.info(f"User {current_user.id} updated post {post_id}", extra={"fields": list(updates)})
    return PostResponse(post=post)


@router.delete("/posts/{post_id}", response_model=DeleteResponse)
@write_rate_limit
async def delete_post(
    request: Request,
    post_id: str,
    current_user: AuthUser = Depends(get_current_user),
) -> DeleteResponse:
    """
    Delete the caller's own post.

    Raises:
        HTTPException: 404 if the post is missing or owned by someone else
        HTTPException: 500 if the delete fails
    """
    _owned_or_404(POSTS_TABLE, post_id, current_user, "Post not found or unauthorized")

    try:
        get_query_builder().delete_record(POSTS_TABLE, post_id)
    except Exception as e:
        logger.error(f"Error deleting post {post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete post",
        ) from e

    logger.info(f"User {current_user.id} deleted post {post_id}")
    return DeleteResponse()


@router.post("/replies", response_model=ReplyResponse, status_code=status.HTTP_201_CREATED)
@write_rate_limit
async def create_reply(
    request: Request,
    req: ReplyCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> ReplyResponse:
    """
    Reply to a published post, optionally under another reply of the same post.

    The post's author is notified unless they wrote the reply. A failed
    notification does not fail the reply.

    Raises:
        HTTPException: 400 if postId or content is missing
        HTTPException: 404 if the post or the parent reply does not exist
        HTTPException: 500 if the reply cannot be created
    """
    content = (req.content or "").strip()
    if not req.post_id or not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Post ID and content are required",
        )

    db = get_query_builder()

    try:
        post = db.find_one(
            POSTS_TABLE, filters={"id": req.post_id, "status": PUBLISHED}, columns="id, user_id"
        )
        parent = None
        if req.parent_reply_id:
            parent = db.find_one(
                REPLIES_TABLE,
                filters={"id": req.parent_reply_id, "post_id": req.post_id},
                columns="id",
            )
    except Exception as e:
        logger.error(f"Error checking reply target {req.post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if req.parent_reply_id and not parent:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent reply not found")

    try:
        reply = db.insert_record(
            REPLIES_TABLE,
            {
                "post_id": req.post_id,
                "user_id": str(current_user.id),
                "content": content,
                "parent_reply_id": req.parent_reply_id,
                "status": PUBLISHED,
            },
        )
    except Exception as e:
        logger.error(f"Error creating reply on post {req.post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create reply",
        ) from e

    if not reply:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create reply",
        )

    logger.info(f"User {current_user.id} replied to post {req.post_id}")
    PostHogService().track_reply_created(
        current_user.id, req.post_id, nested=req.parent_reply_id is not None
    )

    author_id = post.get("user_id")
    if author_id and author_id != str(current_user.id):
        try:
            author = fetch_author(get_supabase_admin_client(), author_id)
            record_forum_notification(
                db,
                author_id,
                "reply",
                {
                    "postId": req.post_id,
                    "replyId": reply.get("id"),
                    "actorUserId": str(current_user.id),
                },
                fallback_email=author.get("email"),
            )
        except Exception as e:
            logger.error(f"Error notifying author {author_id} of reply: {e}")

    mentions = extract_mentions(content)
    if mentions:
        # Handles are not linked to user ids, so mentions are only logged
        logger.info(f"Mentions in reply {reply.get('id')}", extra={"mentions": mentions})

    user = {
        "id": str(current_user.id),
        "email": current_user.email,
        "raw_user_meta_data": current_user.user_metadata,
    }
    return ReplyResponse(reply={**reply, "user": user})


@router.put("/replies/{reply_id}", response_model=ReplyResponse)
@write_rate_limit
async def update_reply(
    request: Request,
    reply_id: str,
    req: ReplyUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
) -> ReplyResponse:
    """
    Edit the caller's own reply.

    Raises:
        HTTPException: 400 if content is missing or blank
        HTTPException: 404 if the reply is missing or owned by someone else
        HTTPException: 500 if the update fails
    """
    content = (req.content or "").strip()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content is required",
        )

    _owned_or_404(REPLIES_TABLE, reply_id, current_user, "Reply not found or unauthorized")

    try:
        reply = get_query_builder().update_record(REPLIES_TABLE, reply_id, {"content": content})
    except Exception as e:
        logger.error(f"Error updating reply {reply_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update reply",
        ) from e

    if not reply:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update reply",
        )

    return ReplyResponse(reply=with_authors([reply])[0])


@router.delete("/replies/{reply_id}", response_model=DeleteResponse)
@write_rate_limit
async def delete_reply(
    request: Request,
    reply_id: str,
    current_user: AuthUser = Depends(get_current_user),
) -> DeleteResponse:
    """
    Withdraw the caller's own reply. The row stays, marked deleted, so
    nested replies keep their parent.

    Raises:
        HTTPException: 404 if the reply is missing or owned by someone else
        HTTPException: 500 if the update fails
    """
    _owned_or_404(REPLIES_TABLE, reply_id, current_user, "Reply not found or unauthorized")

    try:
        get_query_builder().update_record(REPLIES_TABLE, reply_id, {"status": DELETED})
    except Exception as e:
        logger.error(f"Error deleting reply {reply_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete reply",
        ) from e

    logger.info(f"User {current_user.id} deleted reply {reply_id}")
    return DeleteResponse()
