from typing import Optional, List
from datetime import datetime
from forum_api.schemas.common_schema import CamelModel, AuthorInfo
from forum_api.schemas.category_schema import CategoryRef
from forum_api.schemas.reaction_schema import ReactionInfo
from forum_api.schemas.reply_schema import ReplyNode

class PostCreate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category_id: Optional[int] = None

class PostInDB(CamelModel):
    id: int
    title: str
    slug: str
    content: str
    category_id: int
    author_id: int
    view_count: int = 0
    reply_count: int = 0
    is_sticky: bool = False
    is_locked: bool = False
    created_at: datetime
    last_reply_at: Optional[datetime] = None

class PostWithAuthor(PostInDB):
    author: AuthorInfo
    category: CategoryRef
    reaction_count: int = 0
    # 'post' or 'reply' when returned by search
    match_type: Optional[str] = None

class PostDetail(PostWithAuthor):
    reactions: List[ReactionInfo] = []
    replies: List[ReplyNode] = []
    reply_pages: int = 1

class PostListResponse(CamelModel):
    posts: List[PostWithAuthor]
    total_count: int
    current_page: int
    total_pages: int
