from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from forum_api.db.session import get_db
from forum_api.exceptions import ForumError
from forum_api.schemas.category_schema import CategoryNode, BreadcrumbItem, InitCitiesResponse
from forum_api.services.category_service import CategoryService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=List[CategoryNode])
async def list_categories(db: AsyncSession = Depends(get_db)):
    """Active category tree with post counts"""
    try:
        return await CategoryService(db).list_tree()
    except Exception as e:
        logger.error(f"Error fetching forum categories: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.get("/{category_id}/breadcrumb", response_model=List[BreadcrumbItem])
async def get_breadcrumb(category_id: int, db: AsyncSession = Depends(get_db)):
    """Root-to-category navigation path"""
    try:
        return await CategoryService(db).resolve_breadcrumb(category_id)
    except ForumError:
        raise
    except Exception as e:
        logger.error(f"Error resolving breadcrumb for category {category_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.post("/init-cities", response_model=InitCitiesResponse)
async def init_cities(db: AsyncSession = Depends(get_db)):
    """One-time setup of the city and property-type categories"""
    try:
        return await CategoryService(db).init_cities()
    except Exception as e:
        logger.error(f"Error initializing forum cities: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )
