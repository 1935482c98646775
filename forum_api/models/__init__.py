"""
Models package for the community forum
"""
from forum_api.db.base import Base, BaseModel
from forum_api.models.user import User
from forum_api.models.category import Category
from forum_api.models.post import Post
from forum_api.models.reply import Reply
from forum_api.models.reaction import Reaction

__all__ = [
    'Base',
    'BaseModel',
    'User',
    'Category',
    'Post',
    'Reply',
    'Reaction',
]
