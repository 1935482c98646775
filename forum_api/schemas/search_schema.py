from typing import List
from enum import Enum
from forum_api.schemas.common_schema import CamelModel
from forum_api.schemas.post_schema import PostWithAuthor
from forum_api.schemas.category_schema import CategorySearchItem

class SearchType(str, Enum):
    POSTS = "posts"
    CATEGORIES = "categories"
    ALL = "all"

class SearchResponse(CamelModel):
    query: str
    posts: List[PostWithAuthor] = []
    categories: List[CategorySearchItem] = []
    total_results: int = 0
    current_page: int = 1
    total_pages: int = 1
