from typing import Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, desc, func
from sqlalchemy.orm import selectinload
import logging

from forum_api.models.user import User
from forum_api.models.post import Post
from forum_api.models.reply import Reply
from forum_api.models.reaction import Reaction
from forum_api.exceptions import NotFoundError
from forum_api.schemas.common_schema import AuthorInfo
from forum_api.schemas.reaction_schema import ReactionType, TargetType
from forum_api.schemas.user_schema import UserActivityResponse, UserReplyItem, UserStats
from forum_api.services.post_service import post_summary_query, to_post_summary
from forum_api.utils import pagination

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> User:
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundError("User not found")

        return user

    async def list_user_activity(self, user_id: int, page=None, limit=None) -> UserActivityResponse:
        """A user's posts and replies, newest first"""
        user = await self.get_user(user_id)
        params = pagination.resolve(page, limit)

        posts_stmt = post_summary_query().where(
            Post.author_id == user_id
        ).order_by(desc(Post.created_at), desc(Post.id)).offset(params.skip).limit(params.limit)
        posts_result = await self.db.execute(posts_stmt)
        posts = [to_post_summary(row.Post, row.reaction_count) for row in posts_result.all()]

        replies_stmt = select(Reply).options(
            selectinload(Reply.post)
        ).where(
            Reply.author_id == user_id
        ).order_by(desc(Reply.created_at), desc(Reply.id)).offset(params.skip).limit(params.limit)
        replies_result = await self.db.execute(replies_stmt)
        replies = [UserReplyItem.model_validate(r) for r in replies_result.scalars().all()]

        posts_count = await self._count(Post, Post.author_id == user_id)
        replies_count = await self._count(Reply, Reply.author_id == user_id)

        return UserActivityResponse(
            user=AuthorInfo.model_validate(user),
            posts=posts,
            replies=replies,
            posts_count=posts_count,
            replies_count=replies_count,
            current_page=params.page,
            total_pages=pagination.total_pages(posts_count, params.limit)
        )

    async def user_stats(self, user_id: int) -> UserStats:
        """Post/reply totals and reactions received and given, per type"""
        user = await self.get_user(user_id)

        post_count = await self._count(Post, Post.author_id == user_id)
        reply_count = await self._count(Reply, Reply.author_id == user_id)

        own_posts = select(Post.id).where(Post.author_id == user_id)
        own_replies = select(Reply.id).where(Reply.author_id == user_id)
        received = await self._reaction_counts(
            or_(
                and_(Reaction.target_type == TargetType.POST.value, Reaction.target_id.in_(own_posts)),
                and_(Reaction.target_type == TargetType.REPLY.value, Reaction.target_id.in_(own_replies))
            )
        )
        given = await self._reaction_counts(Reaction.user_id == user_id)

        return UserStats(
            user=AuthorInfo.model_validate(user),
            post_count=post_count,
            reply_count=reply_count,
            total_posts=post_count + reply_count,
            reactions_received=received,
            reactions_given=given,
            total_reactions_received=sum(received.values()),
            total_reactions_given=sum(given.values())
        )

    async def _count(self, model, condition) -> int:
        stmt = select(func.count(model.id)).where(condition)
        return (await self.db.execute(stmt)).scalar_one()

    async def _reaction_counts(self, condition) -> Dict[str, int]:
        stmt = select(Reaction.type, func.count(Reaction.id)).where(condition).group_by(Reaction.type)
        result = await self.db.execute(stmt)
        counts = {reaction_type.value: 0 for reaction_type in ReactionType}
        for reaction_type, count in result.all():
            counts[reaction_type] = count
        return counts
