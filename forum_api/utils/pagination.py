"""
Offset pagination shared by post listings, reply pages and search.

Query parameters arrive as raw strings; anything unusable falls back to
the default instead of failing the request.
"""
import math
from typing import Any, NamedTuple, Optional

from forum_api.config import settings


class PageParams(NamedTuple):
    page: int
    limit: int
    skip: int


def _parse_positive(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            return None
    return number if number >= 1 else None


def resolve(
    page: Any = None,
    limit: Any = None,
    default_page: int = 1,
    default_limit: Optional[int] = None,
    max_limit: Optional[int] = None,
) -> PageParams:
    """Parse page/limit and compute the row offset."""
    if default_limit is None:
        default_limit = settings.DEFAULT_PAGE_SIZE
    if max_limit is None:
        max_limit = settings.MAX_PAGE_SIZE

    page_num = _parse_positive(page) or default_page
    limit_num = _parse_positive(limit)
    if limit_num is None or limit_num > max_limit:
        limit_num = default_limit

    return PageParams(page=page_num, limit=limit_num, skip=(page_num - 1) * limit_num)


def total_pages(total_count: int, limit: int) -> int:
    """Number of pages for ``total_count`` rows; an empty set is one page."""
    if limit < 1:
        return 1
    return max(1, math.ceil(total_count / limit))
