from sqlalchemy import Column, String, Text, Integer, ForeignKey, Boolean, DateTime, Index
from sqlalchemy.orm import relationship
from forum_api.db.base import BaseModel

class Post(BaseModel):
    __tablename__ = "forum_posts"

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    category_id = Column(Integer, ForeignKey("forum_categories.id"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    is_sticky = Column(Boolean, default=False, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)

    # Best-effort counter, may under-count when an increment is dropped
    view_count = Column(Integer, default=0, nullable=False)
    # Maintained in the same transaction as each reply insert
    reply_count = Column(Integer, default=0, nullable=False)
    last_reply_at = Column(DateTime, nullable=True)
    last_reply_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    author = relationship("User", back_populates="posts", foreign_keys=[author_id])
    last_reply_by = relationship("User", foreign_keys=[last_reply_by_id])
    category = relationship("Category", back_populates="posts")
    replies = relationship("Reply", back_populates="post")

    __table_args__ = (
        Index('ix_forum_posts_category_id', 'category_id'),
        Index('ix_forum_posts_author_id', 'author_id'),
        Index('ix_forum_posts_created_at', 'created_at'),
        Index('ix_forum_posts_listing', 'is_sticky', 'last_reply_at', 'created_at'),
    )
