from typing import List, Optional, Dict, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, asc
from sqlalchemy.orm import selectinload
import logging

from forum_api.config import settings
from forum_api.db.base import utcnow
from forum_api.models.post import Post
from forum_api.models.reply import Reply
from forum_api.exceptions import ValidationError, NotFoundError, ForbiddenError
from forum_api.schemas.reaction_schema import ReactionInfo, TargetType
from forum_api.schemas.reply_schema import ReplyResponse, ReplyNode, ReplyListResponse
from forum_api.services.reaction_service import ReactionService
from forum_api.utils import pagination

logger = logging.getLogger(__name__)

def _depths(replies: Iterable[Reply]) -> Dict[int, int]:
    """Storage depth of every reply; a reply whose parent is absent counts as top level"""
    by_id = {reply.id: reply for reply in replies}
    depths: Dict[int, int] = {}

    for reply_id in by_id:
        chain = []
        current = reply_id
        while current in by_id and current not in depths and len(chain) <= len(by_id):
            chain.append(current)
            current = by_id[current].parent_id
        depth = depths.get(current, 0)
        for node_id in reversed(chain):
            depth += 1
            depths[node_id] = depth

    return depths

def build_tree(
    replies: Iterable[Reply],
    reactions: Optional[Dict[int, List[ReactionInfo]]] = None,
    max_depth: Optional[int] = None
) -> List[ReplyNode]:
    """Materialize flat reply rows into display threads.

    Siblings are ordered by creation time. Replies nested deeper than
    ``max_depth`` are shown under their ancestor one level above the cap,
    so the display never exceeds ``max_depth`` levels.
    """
    if max_depth is None:
        max_depth = settings.REPLY_DISPLAY_DEPTH
    reactions = reactions or {}

    ordered = sorted(replies, key=lambda r: (r.created_at, r.id))
    by_id = {reply.id: reply for reply in ordered}
    depths = _depths(ordered)

    nodes: Dict[int, ReplyNode] = {}
    for reply in ordered:
        nodes[reply.id] = ReplyNode(
            **ReplyResponse.model_validate(reply).model_dump(),
            depth=min(depths[reply.id], max_depth),
            reactions=reactions.get(reply.id, [])
        )

    roots = []
    for reply in ordered:
        parent_id = reply.parent_id if reply.parent_id in by_id else None
        if parent_id is None or max_depth <= 1:
            roots.append(nodes[reply.id])
            continue

        while depths[parent_id] > max_depth - 1:
            parent_id = by_id[parent_id].parent_id
        nodes[parent_id].children.append(nodes[reply.id])

    return roots

def flatten(
    replies: Iterable[Reply],
    reactions: Optional[Dict[int, List[ReactionInfo]]] = None,
    max_depth: Optional[int] = None
) -> List[ReplyNode]:
    """Chronological reply list with display depth but no nesting"""
    if max_depth is None:
        max_depth = settings.REPLY_DISPLAY_DEPTH
    reactions = reactions or {}

    ordered = sorted(replies, key=lambda r: (r.created_at, r.id))
    depths = _depths(ordered)
    return [
        ReplyNode(
            **ReplyResponse.model_validate(reply).model_dump(),
            depth=min(depths[reply.id], max_depth),
            reactions=reactions.get(reply.id, [])
        )
        for reply in ordered
    ]

def reply_pages(reply_count: int) -> int:
    return pagination.total_pages(reply_count, settings.REPLIES_PER_PAGE)

class ReplyService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.reactions = ReactionService(db)

    async def _get_post(self, post_id: int) -> Post:
        stmt = select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        post = result.scalar_one_or_none()

        if not post:
            raise NotFoundError("Post not found")

        return post

    async def create_reply(
        self,
        author_id: int,
        post_id: Optional[int],
        content: Optional[str],
        parent_id: Optional[int] = None
    ) -> ReplyResponse:
        """Create a reply and bump the post's counters in one transaction"""
        if not content or not content.strip() or post_id is None:
            raise ValidationError("Missing required fields")

        post = await self._get_post(post_id)
        if post.is_locked:
            raise ForbiddenError("Post is locked for replies")

        if parent_id is not None:
            parent_stmt = select(Reply.id).where(
                and_(
                    Reply.id == parent_id,
                    Reply.post_id == post_id
                )
            )
            parent_result = await self.db.execute(parent_stmt)
            if parent_result.scalar_one_or_none() is None:
                raise NotFoundError("Parent reply not found or doesn't belong to this post")

        now = utcnow()
        try:
            reply = Reply(
                post_id=post_id,
                author_id=author_id,
                content=content,
                parent_id=parent_id,
                created_at=now,
                updated_at=now
            )
            self.db.add(reply)
            await self.db.flush()

            await self.db.execute(
                update(Post).where(Post.id == post_id).values(
                    reply_count=Post.reply_count + 1,
                    last_reply_at=now,
                    last_reply_by_id=author_id
                )
            )
            await self.db.commit()

        except Exception as e:
            logger.error(f"Error creating reply: {e}")
            await self.db.rollback()
            raise

        logger.info(f"Created reply {reply.id} by user {author_id} on post {post_id}")

        stmt = select(Reply).options(
            selectinload(Reply.author)
        ).where(Reply.id == reply.id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return ReplyResponse.model_validate(result.scalar_one())

    async def load_replies(self, post_id: int) -> List[Reply]:
        stmt = select(Reply).options(
            selectinload(Reply.author)
        ).where(
            Reply.post_id == post_id
        ).order_by(asc(Reply.created_at), asc(Reply.id))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def thread_for_post(self, post_id: int) -> List[ReplyNode]:
        """Full display tree with reactions, as embedded in the post page"""
        replies = await self.load_replies(post_id)
        reactions = await self.reactions.reactions_for(TargetType.REPLY, (r.id for r in replies))
        return build_tree(replies, reactions)

    async def list_for_post(
        self,
        post_id: int,
        page=None,
        flat: bool = False
    ) -> ReplyListResponse:
        """Replies of a post, as a display tree or a flat chronological list.

        With ``page``, a fixed page size applies: replies in flat mode,
        top-level threads in tree mode.
        """
        post = await self._get_post(post_id)

        replies = await self.load_replies(post_id)
        reactions = await self.reactions.reactions_for(TargetType.REPLY, (r.id for r in replies))
        items = flatten(replies, reactions) if flat else build_tree(replies, reactions)

        current_page = 1
        total_pages = reply_pages(len(items))
        if page is not None:
            params = pagination.resolve(
                page,
                settings.REPLIES_PER_PAGE,
                default_limit=settings.REPLIES_PER_PAGE,
                max_limit=settings.REPLIES_PER_PAGE
            )
            current_page = params.page
            items = items[params.skip:params.skip + params.limit]

        return ReplyListResponse(
            post_id=post.id,
            reply_count=post.reply_count,
            replies=items,
            current_page=current_page,
            total_pages=total_pages
        )
