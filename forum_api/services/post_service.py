from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy import select, update, desc, func
from sqlalchemy.sql import Select
import logging

from forum_api.config import settings
from forum_api.models.post import Post
from forum_api.models.reaction import Reaction
from forum_api.exceptions import ValidationError, NotFoundError, ConflictError
from forum_api.schemas.post_schema import PostWithAuthor, PostDetail, PostListResponse
from forum_api.schemas.reaction_schema import TargetType
from forum_api.services.category_service import CategoryService
from forum_api.services.reaction_service import ReactionService
from forum_api.services.reply_service import ReplyService, reply_pages
from forum_api.utils import pagination
from forum_api.utils.slug import SlugGenerator

logger = logging.getLogger(__name__)

def post_reaction_count():
    return (
        select(func.count(Reaction.id))
        .where(
            Reaction.target_type == TargetType.POST.value,
            Reaction.target_id == Post.id
        )
        .correlate(Post)
        .scalar_subquery()
        .label("reaction_count")
    )

def post_summary_query(*extra_columns) -> Select:
    """Posts with author/category projections and a reaction count column"""
    return select(Post, post_reaction_count(), *extra_columns).options(
        selectinload(Post.author),
        selectinload(Post.category)
    ).execution_options(populate_existing=True)

def to_post_summary(post: Post, reaction_count: int, match_type: Optional[str] = None) -> PostWithAuthor:
    return PostWithAuthor.model_validate(post).model_copy(
        update={"reaction_count": reaction_count or 0, "match_type": match_type}
    )

def listing_order():
    # Sticky first, then most recent activity; posts never replied to sort last
    return (
        desc(Post.is_sticky),
        Post.last_reply_at.is_(None),
        desc(Post.last_reply_at),
        desc(Post.created_at),
        desc(Post.id),
    )

class PostService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.slugs = SlugGenerator()

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(Post.id).where(Post.slug == slug)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def create_post(
        self,
        author_id: int,
        category_id: Optional[int],
        title: Optional[str],
        content: Optional[str]
    ) -> PostWithAuthor:
        """Create a new post.

        The caller has already checked that the author is verified.
        """
        if not title or not title.strip() or not content or not content.strip() or category_id is None:
            raise ValidationError("Missing required fields")

        await CategoryService(self.db).get_category(category_id)

        title = title.strip()
        for attempt in range(1, settings.SLUG_INSERT_RETRIES + 1):
            slug = await self.slugs.generate(title, self.slug_exists)
            post = Post(
                title=title,
                content=content,
                slug=slug,
                category_id=category_id,
                author_id=author_id
            )
            self.db.add(post)

            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                if not await self.slug_exists(slug):
                    # Some other constraint failed, not a slug race
                    logger.error(f"Error creating post: {e}")
                    raise
                # Another request took the slug between probe and insert
                logger.warning(f"Slug '{slug}' taken concurrently, retrying ({attempt}/{settings.SLUG_INSERT_RETRIES})")
                continue
            except Exception as e:
                logger.error(f"Error creating post: {e}")
                await self.db.rollback()
                raise

            logger.info(f"Created post {post.id} '{slug}' by user {author_id} in category {category_id}")
            return await self.get_post_summary(post.id)

        raise ConflictError("Could not generate a unique slug, please retry")

    async def get_post_summary(self, post_id: int) -> PostWithAuthor:
        stmt = post_summary_query().where(Post.id == post_id)
        result = await self.db.execute(stmt)
        row = result.first()

        if not row:
            raise NotFoundError("Post not found")

        return to_post_summary(row.Post, row.reaction_count)

    async def increment_view_count(self, slug: str) -> None:
        """Best-effort view counter; a failed increment is dropped, never raised"""
        try:
            await self.db.execute(
                update(Post).where(Post.slug == slug).values(view_count=Post.view_count + 1)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Dropped view count increment for post '{slug}': {e}")
            await self.db.rollback()

    async def get_post_by_slug(self, slug: str) -> PostDetail:
        """Post page: post, author, category, reactions and the reply tree"""
        await self.increment_view_count(slug)

        stmt = post_summary_query().where(Post.slug == slug)
        result = await self.db.execute(stmt)
        row = result.first()

        if not row:
            raise NotFoundError("Post not found")

        post = row.Post
        summary = to_post_summary(post, row.reaction_count)

        reactions = await ReactionService(self.db).reactions_for(TargetType.POST, [post.id])
        replies = await ReplyService(self.db).thread_for_post(post.id)

        return PostDetail(
            **summary.model_dump(),
            reactions=reactions[post.id],
            replies=replies,
            reply_pages=reply_pages(post.reply_count)
        )

    async def list_posts(
        self,
        category_id: Optional[int] = None,
        page=None,
        limit=None
    ) -> PostListResponse:
        """Posts for the forum index or one category, sticky first"""
        params = pagination.resolve(page, limit)
        filters = [Post.category_id == category_id] if category_id is not None else []

        count_stmt = select(func.count(Post.id)).where(*filters)
        total_count = (await self.db.execute(count_stmt)).scalar_one()

        stmt = post_summary_query().where(*filters).order_by(
            *listing_order()
        ).offset(params.skip).limit(params.limit)
        result = await self.db.execute(stmt)

        posts: List[PostWithAuthor] = [
            to_post_summary(row.Post, row.reaction_count) for row in result.all()
        ]

        return PostListResponse(
            posts=posts,
            total_count=total_count,
            current_page=params.page,
            total_pages=pagination.total_pages(total_count, params.limit)
        )
