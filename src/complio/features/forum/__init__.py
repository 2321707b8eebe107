"""Forum feature: posts, replies, likes, bookmarks and follows."""

from fastapi import APIRouter

from src.complio.features.forum.handlers import router as interactions_router
from src.complio.features.forum.post_handlers import router as posts_router

router = APIRouter()
router.include_router(posts_router)
router.include_router(interactions_router)

__all__ = ["router"]
