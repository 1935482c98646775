from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from forum_api.db.session import get_db
from forum_api.exceptions import ForumError
from forum_api.schemas.reply_schema import ReplyCreate, ReplyResponse, ReplyListResponse
from forum_api.schemas.user_schema import Identity
from forum_api.services.auth_service import get_current_identity, require_verified
from forum_api.services.reply_service import ReplyService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=ReplyListResponse)
async def list_replies(
    post_id: int = Query(..., alias="postId"),
    page: Optional[str] = Query(None),
    flat: bool = Query(False),
    db: AsyncSession = Depends(get_db)
):
    """Replies of a post as a thread tree or a flat list"""
    try:
        return await ReplyService(db).list_for_post(post_id, page=page, flat=flat)
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error fetching replies for post {post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.post("", response_model=ReplyResponse, status_code=status.HTTP_201_CREATED)
async def create_reply(
    reply_data: ReplyCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Reply to a post or to another reply"""
    require_verified(identity, "reply")
    try:
        return await ReplyService(db).create_reply(
            author_id=identity.user_id,
            post_id=reply_data.post_id,
            content=reply_data.content,
            parent_id=reply_data.parent_id
        )
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error creating forum reply: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )
