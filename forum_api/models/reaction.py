from sqlalchemy import Column, Integer, ForeignKey, String, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from forum_api.db.base import BaseModel

class Reaction(BaseModel):
    __tablename__ = "forum_reactions"

    # Polymorphic target: 'POST' or 'REPLY', no foreign key on target_id
    target_type = Column(String(10), nullable=False)
    target_id = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String(20), nullable=False)

    # Relationships
    user = relationship("User", back_populates="reactions")

    __table_args__ = (
        # A second identical reaction is a removal, never a second row
        UniqueConstraint('target_type', 'target_id', 'user_id', 'type', name='uq_forum_reactions_toggle'),

        CheckConstraint(
            "target_type IN ('POST', 'REPLY')",
            name='check_reaction_target_type'
        ),
        CheckConstraint(
            "type IN ('THANKS', 'LAUGH', 'CONFUSED', 'SAD', 'ANGRY', 'LOVE')",
            name='check_reaction_type'
        ),

        Index('ix_forum_reactions_target', 'target_type', 'target_id'),
        Index('ix_forum_reactions_user_id', 'user_id'),
    )
