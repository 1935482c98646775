from sqlalchemy import Column, String, Boolean, Index
from sqlalchemy.orm import relationship
from forum_api.db.base import BaseModel

class User(BaseModel):
    """Marketplace account, owned by the external identity service.

    The forum only reads it: author projections and the verification
    flags that gate posting and replying.
    """
    __tablename__ = "users"

    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=True)
    image = Column(String(255))
    email_verified = Column(Boolean, default=False, nullable=False)
    mobile_verified = Column(Boolean, default=False, nullable=False)

    # Relationships
    posts = relationship("Post", back_populates="author", foreign_keys="Post.author_id")
    replies = relationship("Reply", back_populates="author")
    reactions = relationship("Reaction", back_populates="user")

    __table_args__ = (
        Index('ix_users_created_at', 'created_at'),
    )
