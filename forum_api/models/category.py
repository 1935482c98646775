from sqlalchemy import Column, String, Text, Integer, ForeignKey, Boolean, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship
from forum_api.db.base import BaseModel

class Category(BaseModel):
    """Node of the discussion taxonomy.

    Root area -> city/state grouping -> property-type leaf. Rows are flat
    with a nullable parent pointer; readers materialize at most three levels.
    """
    __tablename__ = "forum_categories"

    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False)
    description = Column(Text)
    parent_id = Column(Integer, ForeignKey("forum_categories.id"), nullable=True)

    # Label/icon discriminators, never part of identity
    city = Column(String(50))
    state = Column(String(50))
    property_type = Column(String(30))

    display_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    parent = relationship("Category", remote_side="Category.id", backref="children")
    posts = relationship("Post", back_populates="category")

    __table_args__ = (
        UniqueConstraint('parent_id', 'slug', name='uq_forum_categories_parent_slug'),
        # NULL parents never collide in the constraint above
        Index(
            'uq_forum_categories_root_slug',
            'slug',
            unique=True,
            postgresql_where=text('parent_id IS NULL'),
            sqlite_where=text('parent_id IS NULL')
        ),
        Index('ix_forum_categories_parent_id', 'parent_id'),
        Index('ix_forum_categories_display_order', 'display_order'),
        Index('ix_forum_categories_city', 'city'),
    )
