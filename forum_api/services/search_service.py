"""
Forum search over posts and categories.

Plain case-insensitive substring matching in the relational store; the
query shape decides which branches run and how they are limited.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_, asc, desc, func, case, literal
from sqlalchemy.orm import selectinload

from forum_api.config import settings
from forum_api.models.category import Category
from forum_api.models.post import Post
from forum_api.models.reply import Reply
from forum_api.exceptions import ValidationError
from forum_api.schemas.category_schema import CategorySearchItem
from forum_api.schemas.post_schema import PostWithAuthor
from forum_api.schemas.search_schema import SearchType, SearchResponse
from forum_api.services.category_service import CategoryService
from forum_api.services.post_service import post_summary_query, to_post_summary
from forum_api.utils import pagination

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


def like_pattern(query: str) -> str:
    """``%query%`` with LIKE wildcards in the query taken literally"""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def validate_query(query) -> str:
    if query is None or not isinstance(query, str) or not query.strip():
        raise ValidationError("Query parameter is required")

    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise ValidationError(f"Query must be at least {MIN_QUERY_LENGTH} characters")

    return query


class SearchService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def search(
        self,
        query,
        type=None,
        category_id: Optional[int] = None,
        city: Optional[str] = None,
        property_type: Optional[str] = None,
        page=None,
        limit=None,
        include_replies: bool = False
    ) -> SearchResponse:
        query = validate_query(query)
        try:
            search_type = SearchType(type or SearchType.ALL.value)
        except ValueError:
            raise ValidationError(f"Invalid search type: {type}")

        results = SearchResponse(query=query)

        if search_type == SearchType.POSTS:
            params = pagination.resolve(page, limit)
            posts, total = await self._search_posts(
                query, category_id, city, property_type, params.skip, params.limit, include_replies
            )
            results.posts = posts
            results.total_results = total
            results.current_page = params.page
            results.total_pages = pagination.total_pages(total, params.limit)

        elif search_type == SearchType.CATEGORIES:
            results.categories = await self._search_categories(query, city)
            results.total_results = len(results.categories)

        else:
            # Overview: first few hits of each kind, no paging
            posts, _ = await self._search_posts(
                query, category_id, city, property_type, 0, settings.SEARCH_ALL_POST_LIMIT, include_replies
            )
            results.posts = posts
            results.categories = await self._search_categories(query, city)
            results.total_results = len(results.posts) + len(results.categories)

        logger.debug(f"Search '{query}' ({search_type.value}) -> {results.total_results} results")
        return results

    async def _search_posts(
        self,
        query: str,
        category_id: Optional[int],
        city: Optional[str],
        property_type: Optional[str],
        skip: int,
        limit: int,
        include_replies: bool
    ) -> Tuple[List[PostWithAuthor], int]:
        pattern = like_pattern(query)
        direct_match = or_(
            Post.title.ilike(pattern, escape="\\"),
            Post.content.ilike(pattern, escape="\\")
        )

        conditions = []
        if include_replies:
            reply_hits = select(Reply.post_id).where(Reply.content.ilike(pattern, escape="\\"))
            conditions.append(or_(direct_match, Post.id.in_(reply_hits)))
            match_type = case((direct_match, literal("post")), else_=literal("reply"))
        else:
            conditions.append(direct_match)
            match_type = literal("post")

        # An explicit category wins over the city/property-type filter
        if category_id is not None:
            conditions.append(Post.category_id == category_id)
        elif city:
            category_filter = [Category.city == city]
            if property_type:
                category_filter.append(Category.property_type == property_type)
            conditions.append(Post.category.has(and_(*category_filter)))

        count_stmt = select(func.count(Post.id)).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = post_summary_query(match_type.label("match_type")).where(*conditions).order_by(
            desc(Post.created_at),
            desc(Post.id)
        ).offset(skip).limit(limit)
        result = await self.db.execute(stmt)

        posts = [
            to_post_summary(row.Post, row.reaction_count, row.match_type)
            for row in result.all()
        ]
        return posts, total

    async def _search_categories(self, query: str, city: Optional[str]) -> List[CategorySearchItem]:
        pattern = like_pattern(query)
        stmt = select(Category).options(
            selectinload(Category.parent)
        ).where(
            or_(
                Category.name.ilike(pattern, escape="\\"),
                Category.description.ilike(pattern, escape="\\")
            ),
            Category.is_active.is_(True)
        )

        if city:
            stmt = stmt.where(Category.city == city)

        stmt = stmt.order_by(
            asc(Category.display_order),
            asc(Category.id)
        ).limit(settings.SEARCH_CATEGORY_LIMIT)

        result = await self.db.execute(stmt)
        categories = list(result.scalars().all())

        counts = await CategoryService(self.db).post_counts(c.id for c in categories)

        return [
            CategorySearchItem.model_validate(category).model_copy(
                update={"post_count": counts.get(category.id, 0)}
            )
            for category in categories
        ]
