import re
import logging
from typing import Awaitable, Callable, Optional

from forum_api.config import settings
from forum_api.exceptions import ConflictError

logger = logging.getLogger(__name__)

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

FALLBACK_SLUG = "post"


def slugify(title: str, max_length: Optional[int] = None) -> str:
    """Lowercase, hyphenated ``[a-z0-9-]+`` form of a title."""
    if max_length is None:
        max_length = settings.SLUG_MAX_LENGTH

    slug = _DISALLOWED.sub("", (title or "").lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or FALLBACK_SLUG


class SlugGenerator:
    """Derives a free slug by probing ``base``, ``base-1``, ``base-2``..."""

    def __init__(self, max_attempts: Optional[int] = None):
        self.max_attempts = max_attempts or settings.SLUG_MAX_ATTEMPTS

    async def generate(self, title: str, exists: Callable[[str], Awaitable[bool]]) -> str:
        base = slugify(title)
        candidate = base
        for counter in range(1, self.max_attempts + 1):
            if not await exists(candidate):
                return candidate
            candidate = f"{base}-{counter}"

        logger.warning(f"Slug generation exhausted {self.max_attempts} attempts for '{base}'")
        raise ConflictError(f"Could not generate a unique slug for '{base}'")
