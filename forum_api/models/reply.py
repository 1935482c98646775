from sqlalchemy import Column, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from forum_api.db.base import BaseModel

class Reply(BaseModel):
    __tablename__ = "forum_replies"

    post_id = Column(Integer, ForeignKey("forum_posts.id"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    # Must point at a reply of the same post
    parent_id = Column(Integer, ForeignKey("forum_replies.id"), nullable=True)

    # Relationships
    post = relationship("Post", back_populates="replies")
    author = relationship("User", back_populates="replies")
    parent = relationship(
        "Reply",
        remote_side="Reply.id",
        backref="children",
        foreign_keys=[parent_id]
    )

    __table_args__ = (
        Index('ix_forum_replies_post_id', 'post_id'),
        Index('ix_forum_replies_author_id', 'author_id'),
        Index('ix_forum_replies_parent_id', 'parent_id'),
        Index('ix_forum_replies_created_at', 'created_at'),
    )
