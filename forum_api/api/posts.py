from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from forum_api.db.session import get_db
from forum_api.exceptions import ForumError
from forum_api.schemas.post_schema import PostCreate, PostWithAuthor, PostDetail, PostListResponse
from forum_api.schemas.user_schema import Identity
from forum_api.services.auth_service import get_current_identity, require_verified
from forum_api.services.post_service import PostService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=PostListResponse)
async def list_posts(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Posts with pagination, sticky first"""
    try:
        return await PostService(db).list_posts(category_id, page, limit)
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error fetching forum posts: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.post("", response_model=PostWithAuthor, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Create a new post"""
    require_verified(identity, "post")
    try:
        return await PostService(db).create_post(
            author_id=identity.user_id,
            category_id=post_data.category_id,
            title=post_data.title,
            content=post_data.content
        )
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error creating forum post: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.get("/{slug}", response_model=PostDetail)
async def get_post(slug: str, db: AsyncSession = Depends(get_db)):
    """Get a post with its replies and reactions"""
    try:
        return await PostService(db).get_post_by_slug(slug)
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error fetching forum post '{slug}': {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )
