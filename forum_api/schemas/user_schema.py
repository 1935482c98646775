from typing import Optional, List, Dict
from datetime import datetime
from forum_api.schemas.common_schema import CamelModel, AuthorInfo
from forum_api.schemas.post_schema import PostWithAuthor

class PostRef(CamelModel):
    id: int
    title: str
    slug: str

class UserReplyItem(CamelModel):
    id: int
    content: str
    parent_id: Optional[int] = None
    created_at: datetime
    post: PostRef

class UserActivityResponse(CamelModel):
    user: AuthorInfo
    posts: List[PostWithAuthor]
    replies: List[UserReplyItem]
    posts_count: int
    replies_count: int
    current_page: int
    total_pages: int

class UserStats(CamelModel):
    """Forum statistics for a user"""
    user: AuthorInfo
    post_count: int = 0
    reply_count: int = 0
    total_posts: int = 0
    reactions_received: Dict[str, int] = {}
    reactions_given: Dict[str, int] = {}
    total_reactions_received: int = 0
    total_reactions_given: int = 0

class Identity(CamelModel):
    """Verified caller as supplied by the marketplace auth service"""
    user_id: int
    is_email_verified: bool = False
    is_mobile_verified: bool = False

    @property
    def is_verified(self) -> bool:
        return self.is_email_verified or self.is_mobile_verified
