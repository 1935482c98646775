from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from forum_api.db.session import get_db
from forum_api.exceptions import ForumError
from forum_api.schemas.search_schema import SearchResponse
from forum_api.services.search_service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=SearchResponse)
async def search(
    q: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    city: Optional[str] = Query(None),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    include_replies: bool = Query(False, alias="includeReplies"),
    db: AsyncSession = Depends(get_db)
):
    """Search posts and categories"""
    try:
        return await SearchService(db).search(
            query=q,
            type=type,
            category_id=category_id,
            city=city,
            property_type=property_type,
            page=page,
            limit=limit,
            include_replies=include_replies
        )
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Search error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )
