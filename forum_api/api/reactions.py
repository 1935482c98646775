from fastapi import APIRouter, Depends, HTTPException, status, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from forum_api.db.session import get_db
from forum_api.exceptions import ForumError, NotFoundError
from forum_api.schemas.reaction_schema import (
    PostReactionRequest,
    ReplyReactionRequest,
    ReactionCounts,
    TargetType,
    ToggleAction,
    ToggleResponse
)
from forum_api.schemas.user_schema import Identity
from forum_api.services.auth_service import get_current_identity, get_optional_identity
from forum_api.services.reaction_service import ReactionService

logger = logging.getLogger(__name__)

router = APIRouter()

TARGET_PATHS = {
    "posts": TargetType.POST,
    "replies": TargetType.REPLY,
}

async def _toggle(
    db: AsyncSession,
    response: Response,
    identity: Identity,
    target_type: TargetType,
    target_id: Optional[int],
    reaction_type: Optional[str]
) -> ToggleResponse:
    try:
        result = await ReactionService(db).toggle(
            user_id=identity.user_id,
            target_type=target_type,
            target_id=target_id,
            reaction_type=reaction_type
        )
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error handling {target_type.value.lower()} reaction: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    if result.action == ToggleAction.ADDED:
        response.status_code = status.HTTP_201_CREATED
    return result

@router.post("/posts", response_model=ToggleResponse, response_model_exclude_none=True)
async def toggle_post_reaction(
    reaction_data: PostReactionRequest,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Add a reaction to a post, or remove it if already given"""
    return await _toggle(db, response, identity, TargetType.POST, reaction_data.post_id, reaction_data.type)

@router.post("/replies", response_model=ToggleResponse, response_model_exclude_none=True)
async def toggle_reply_reaction(
    reaction_data: ReplyReactionRequest,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Add a reaction to a reply, or remove it if already given"""
    return await _toggle(db, response, identity, TargetType.REPLY, reaction_data.reply_id, reaction_data.type)

@router.get("/{target}/{target_id}", response_model=ReactionCounts)
async def get_reaction_counts(
    target: str,
    target_id: int,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db)
):
    """Reaction counts for a post or reply, with the caller's own reactions"""
    target_type = TARGET_PATHS.get(target)
    if target_type is None:
        raise NotFoundError("Unknown reaction target")

    try:
        return await ReactionService(db).counts_for(
            target_type,
            target_id,
            user_id=identity.user_id if identity else None
        )
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error counting reactions for {target} {target_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )
