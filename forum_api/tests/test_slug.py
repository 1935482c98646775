import pytest

from forum_api.exceptions import ConflictError
from forum_api.utils.slug import SlugGenerator, slugify

def test_slugify_lowercases_and_hyphenates():
    assert slugify("Best Villas in Pune!") == "best-villas-in-pune"

def test_slugify_collapses_separators():
    assert slugify("  Rent --  vs   Buy  ") == "rent-vs-buy"

def test_slugify_drops_non_ascii_and_symbols():
    assert slugify("Gurgaon ₹ prices @ 2024 (Q1)") == "gurgaon-prices-2024-q1"

def test_slugify_falls_back_when_nothing_is_left():
    assert slugify("!!! ???") == "post"
    assert slugify("") == "post"

def test_slugify_truncates_without_trailing_hyphen():
    slug = slugify("word " * 100, max_length=12)
    assert len(slug) <= 12
    assert not slug.endswith("-")

@pytest.mark.asyncio
async def test_generator_returns_base_when_free():
    async def exists(slug):
        return False

    assert await SlugGenerator().generate("Hello World", exists) == "hello-world"

@pytest.mark.asyncio
async def test_generator_appends_first_free_counter():
    taken = {"hello-world", "hello-world-1", "hello-world-2"}

    async def exists(slug):
        return slug in taken

    assert await SlugGenerator().generate("Hello World", exists) == "hello-world-3"

@pytest.mark.asyncio
async def test_generator_gives_up_after_max_attempts():
    probed = []

    async def exists(slug):
        probed.append(slug)
        return True

    with pytest.raises(ConflictError):
        await SlugGenerator(max_attempts=5).generate("Busy", exists)

    assert probed == ["busy", "busy-1", "busy-2", "busy-3", "busy-4"]
