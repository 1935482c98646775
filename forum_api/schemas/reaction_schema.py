from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum
from forum_api.schemas.common_schema import CamelModel

class ReactionType(str, Enum):
    THANKS = "THANKS"
    LAUGH = "LAUGH"
    CONFUSED = "CONFUSED"
    SAD = "SAD"
    ANGRY = "ANGRY"
    LOVE = "LOVE"

class TargetType(str, Enum):
    POST = "POST"
    REPLY = "REPLY"

class ToggleAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"

class PostReactionRequest(CamelModel):
    # Presence is checked by the service so a missing field answers 400
    post_id: Optional[int] = None
    type: Optional[str] = None

class ReplyReactionRequest(CamelModel):
    reply_id: Optional[int] = None
    type: Optional[str] = None

class ReactionUser(CamelModel):
    id: int
    username: str

class ReactionInfo(CamelModel):
    id: int
    target_type: TargetType
    target_id: int
    user_id: int
    type: ReactionType
    created_at: datetime
    user: ReactionUser

class ToggleResponse(CamelModel):
    action: ToggleAction
    type: ReactionType
    reaction: Optional[ReactionInfo] = None

class ReactionCounts(CamelModel):
    target_type: TargetType
    target_id: int
    counts: Dict[str, int] = {}
    user_reactions: List[ReactionType] = []
