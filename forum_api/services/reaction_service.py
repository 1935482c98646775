from typing import List, Optional, Dict, Iterable, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy import select, and_, asc, func
import logging

from forum_api.models.reaction import Reaction
from forum_api.models.post import Post
from forum_api.models.reply import Reply
from forum_api.exceptions import ValidationError, NotFoundError, ConflictError
from forum_api.schemas.reaction_schema import (
    ReactionType,
    TargetType,
    ToggleAction,
    ToggleResponse,
    ReactionInfo,
    ReactionCounts
)

logger = logging.getLogger(__name__)

def _parse_choice(enum_cls, value: Union[str, None], label: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Missing required fields")
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value}")

class ReactionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def toggle(
        self,
        user_id: int,
        target_type: Union[TargetType, str, None],
        target_id: Optional[int],
        reaction_type: Union[ReactionType, str, None]
    ) -> ToggleResponse:
        """Add the reaction, or remove it when the user already applied it.

        The unique constraint on (target, user, type) is the safety net: an
        insert that loses a race against an identical insert is turned into
        the removal the second request would have made.
        """
        target_type = _parse_choice(TargetType, target_type, "target type")
        if target_id is None:
            raise ValidationError("Missing required fields")
        reaction_type = _parse_choice(ReactionType, reaction_type, "reaction type")

        await self._ensure_target(target_type, target_id)

        existing = await self._get_existing(user_id, target_type, target_id, reaction_type)
        if existing:
            return await self._remove(existing)

        reaction = Reaction(
            target_type=target_type.value,
            target_id=target_id,
            user_id=user_id,
            type=reaction_type.value
        )
        self.db.add(reaction)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(
                f"Concurrent reaction insert: user={user_id}, {target_type.value}={target_id}, type={reaction_type.value}"
            )
            existing = await self._get_existing(user_id, target_type, target_id, reaction_type)
            if existing is None:
                raise ConflictError("Reaction changed concurrently, please retry")
            return await self._remove(existing)
        except Exception as e:
            logger.error(f"Error adding reaction: {e}")
            await self.db.rollback()
            raise

        logger.info(
            f"Added reaction: user={user_id}, {target_type.value}={target_id}, type={reaction_type.value}"
        )

        stmt = select(Reaction).options(
            selectinload(Reaction.user)
        ).where(Reaction.id == reaction.id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)

        return ToggleResponse(
            action=ToggleAction.ADDED,
            type=reaction_type,
            reaction=ReactionInfo.model_validate(result.scalar_one())
        )

    async def counts_for(
        self,
        target_type: Union[TargetType, str],
        target_id: int,
        user_id: Optional[int] = None
    ) -> ReactionCounts:
        """Count per reaction type, plus the types applied by ``user_id``"""
        target_type = _parse_choice(TargetType, target_type, "target type")

        stmt = select(Reaction.type, func.count(Reaction.id)).where(
            Reaction.target_type == target_type.value,
            Reaction.target_id == target_id
        ).group_by(Reaction.type)
        result = await self.db.execute(stmt)
        counts = {reaction_type: count for reaction_type, count in result.all() if count}

        user_reactions = []
        if user_id is not None:
            stmt = select(Reaction.type).where(
                Reaction.target_type == target_type.value,
                Reaction.target_id == target_id,
                Reaction.user_id == user_id
            )
            result = await self.db.execute(stmt)
            applied = set(result.scalars().all())
            user_reactions = [t for t in ReactionType if t.value in applied]

        return ReactionCounts(
            target_type=target_type,
            target_id=target_id,
            counts=counts,
            user_reactions=user_reactions
        )

    async def reactions_for(
        self,
        target_type: TargetType,
        target_ids: Iterable[int]
    ) -> Dict[int, List[ReactionInfo]]:
        """Reaction rows with user projection, grouped per target"""
        target_ids = list(target_ids)
        grouped: Dict[int, List[ReactionInfo]] = {target_id: [] for target_id in target_ids}
        if not target_ids:
            return grouped

        stmt = select(Reaction).options(
            selectinload(Reaction.user)
        ).where(
            Reaction.target_type == target_type.value,
            Reaction.target_id.in_(target_ids)
        ).order_by(asc(Reaction.created_at), asc(Reaction.id))
        result = await self.db.execute(stmt)

        for reaction in result.scalars().all():
            grouped[reaction.target_id].append(ReactionInfo.model_validate(reaction))

        return grouped

    async def _ensure_target(self, target_type: TargetType, target_id: int) -> None:
        if target_type == TargetType.POST:
            stmt = select(Post.id).where(Post.id == target_id)
            missing = "Post not found"
        else:
            stmt = select(Reply.id).where(Reply.id == target_id)
            missing = "Reply not found"

        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise NotFoundError(missing)

    async def _get_existing(
        self,
        user_id: int,
        target_type: TargetType,
        target_id: int,
        reaction_type: ReactionType
    ) -> Optional[Reaction]:
        stmt = select(Reaction).where(
            and_(
                Reaction.target_type == target_type.value,
                Reaction.target_id == target_id,
                Reaction.user_id == user_id,
                Reaction.type == reaction_type.value
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _remove(self, reaction: Reaction) -> ToggleResponse:
        reaction_type = ReactionType(reaction.type)
        description = f"user={reaction.user_id}, {reaction.target_type}={reaction.target_id}, type={reaction.type}"
        try:
            await self.db.delete(reaction)
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error removing reaction: {e}")
            await self.db.rollback()
            raise

        logger.info(f"Removed reaction: {description}")
        return ToggleResponse(action=ToggleAction.REMOVED, type=reaction_type)
