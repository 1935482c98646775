from typing import Optional, List
from datetime import datetime
from forum_api.schemas.common_schema import CamelModel, AuthorInfo
from forum_api.schemas.reaction_schema import ReactionInfo

class ReplyCreate(CamelModel):
    content: Optional[str] = None
    post_id: Optional[int] = None
    parent_id: Optional[int] = None

class ReplyResponse(CamelModel):
    id: int
    post_id: int
    parent_id: Optional[int] = None
    author_id: int
    content: str
    created_at: datetime
    author: AuthorInfo

class ReplyNode(ReplyResponse):
    depth: int = 1
    reactions: List[ReactionInfo] = []
    children: List['ReplyNode'] = []

class ReplyListResponse(CamelModel):
    post_id: int
    reply_count: int
    replies: List[ReplyNode]
    current_page: int
    total_pages: int

# For nested models
ReplyNode.model_rebuild()
