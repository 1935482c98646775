from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from forum_api.db.session import get_db
from forum_api.exceptions import ForumError
from forum_api.schemas.user_schema import UserActivityResponse, UserStats
from forum_api.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/{user_id}/posts", response_model=UserActivityResponse)
async def get_user_posts(
    user_id: int,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """A user's forum posts and replies"""
    try:
        return await UserService(db).list_user_activity(user_id, page, limit)
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error fetching posts of user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.get("/{user_id}/stats", response_model=UserStats)
async def get_user_stats(user_id: int, db: AsyncSession = Depends(get_db)):
    """A user's forum statistics"""
    try:
        return await UserService(db).user_stats(user_id)
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error fetching forum stats of user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )
