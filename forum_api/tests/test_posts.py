import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Update

from forum_api.exceptions import ConflictError
from forum_api.models.post import Post
from forum_api.services.post_service import PostService

API = "/api/v1/forum/posts"

@pytest.mark.asyncio
async def test_create_post(test_client: AsyncClient, test_user, test_category, auth_headers):
    """Test creating a post"""
    response = await test_client.post(
        API,
        json={"title": "Best Villas in Pune!", "content": "Looking for advice", "categoryId": test_category.id},
        headers=auth_headers(test_user)
    )

    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "best-villas-in-pune"
    assert data["title"] == "Best Villas in Pune!"
    assert data["authorId"] == test_user.id
    assert data["author"]["username"] == "testuser"
    assert data["category"]["id"] == test_category.id
    assert data["category"]["propertyType"] == "VILLAS"
    assert data["viewCount"] == 0
    assert data["replyCount"] == 0
    assert data["reactionCount"] == 0
    assert data["isSticky"] is False
    assert data["lastReplyAt"] is None

@pytest.mark.asyncio
async def test_mobile_verified_user_can_post(test_client: AsyncClient, other_user, test_category, auth_headers):
    response = await test_client.post(
        API,
        json={"title": "Noida metro", "content": "Any updates?", "categoryId": test_category.id},
        headers=auth_headers(other_user)
    )

    assert response.status_code == 201

@pytest.mark.asyncio
async def test_duplicate_titles_get_suffixed_slugs(test_client: AsyncClient, test_user, test_category, auth_headers):
    slugs = []
    for _ in range(3):
        response = await test_client.post(
            API,
            json={"title": "Hello World", "content": "Hi", "categoryId": test_category.id},
            headers=auth_headers(test_user)
        )
        assert response.status_code == 201
        slugs.append(response.json()["slug"])

    assert slugs == ["hello-world", "hello-world-1", "hello-world-2"]

@pytest.mark.asyncio
async def test_create_post_requires_authentication(test_client: AsyncClient, test_category):
    response = await test_client.post(
        API,
        json={"title": "Anon", "content": "Hi", "categoryId": test_category.id}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication required"

@pytest.mark.asyncio
async def test_create_post_rejects_bad_token(test_client: AsyncClient, test_category):
    response = await test_client.post(
        API,
        json={"title": "Anon", "content": "Hi", "categoryId": test_category.id},
        headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401

@pytest.mark.asyncio
async def test_create_post_rejects_refresh_token(test_client: AsyncClient, test_user, test_category, auth_headers):
    response = await test_client.post(
        API,
        json={"title": "Refresh", "content": "Hi", "categoryId": test_category.id},
        headers=auth_headers(test_user, type="refresh")
    )

    assert response.status_code == 401

@pytest.mark.asyncio
async def test_unverified_user_cannot_post(test_client: AsyncClient, unverified_user, test_category, auth_headers, test_db):
    response = await test_client.post(
        API,
        json={"title": "Spam", "content": "Buy now", "categoryId": test_category.id},
        headers=auth_headers(unverified_user)
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Email or mobile verification required to post"
    assert (await test_db.execute(select(Post.id))).first() is None

@pytest.mark.asyncio
@pytest.mark.parametrize("payload, with_category", [
    ({"content": "No title"}, True),
    ({"title": "No content"}, True),
    ({"title": "   ", "content": "Blank title"}, True),
    ({"title": "No category", "content": "Hi"}, False),
])
async def test_create_post_missing_fields(test_client: AsyncClient, test_user, test_category, auth_headers, payload, with_category):
    body = {**payload, "categoryId": test_category.id} if with_category else payload

    response = await test_client.post(API, json=body, headers=auth_headers(test_user))

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"

@pytest.mark.asyncio
async def test_create_post_unknown_category(test_client: AsyncClient, test_user, auth_headers):
    response = await test_client.post(
        API,
        json={"title": "Lost", "content": "Hi", "categoryId": 424242},
        headers=auth_headers(test_user)
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Category not found"

@pytest.mark.asyncio
async def test_slug_taken_between_probe_and_insert_is_retried(test_db, test_user, test_category, post_factory):
    """A slug claimed after the probe makes the insert fail once, then move on"""
    await post_factory(title="Race", slug="race")
    author_id, category_id = test_user.id, test_category.id

    service = PostService(test_db)
    real_exists = service.slug_exists
    calls = {"n": 0}

    async def stale_exists(slug):
        calls["n"] += 1
        if calls["n"] == 1:
            return False
        return await real_exists(slug)

    service.slug_exists = stale_exists

    post = await service.create_post(author_id, category_id, "Race", "Second one")

    assert post.slug == "race-1"

@pytest.mark.asyncio
async def test_slug_retries_exhausted(test_db, test_user, test_category, post_factory):
    await post_factory(title="Race", slug="race")
    author_id, category_id = test_user.id, test_category.id

    service = PostService(test_db)

    async def stale_slug(title, exists):
        return "race"

    service.slugs.generate = stale_slug

    with pytest.raises(ConflictError):
        await service.create_post(author_id, category_id, "Race", "Never stored")

@pytest.mark.asyncio
async def test_list_orders_sticky_then_recent_activity(test_client: AsyncClient, post_factory):
    now = datetime.utcnow()
    quiet = await post_factory(title="Quiet")
    old_reply = await post_factory(title="Old reply", last_reply_at=now - timedelta(days=2))
    sticky = await post_factory(title="Rules", is_sticky=True)
    new_reply = await post_factory(title="New reply", last_reply_at=now - timedelta(hours=1))
    newest_quiet = await post_factory(title="Newest quiet")

    response = await test_client.get(API)

    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data["posts"]] == [
        sticky.id, new_reply.id, old_reply.id, newest_quiet.id, quiet.id
    ]
    assert data["totalCount"] == 5
    assert data["currentPage"] == 1
    assert data["totalPages"] == 1

@pytest.mark.asyncio
async def test_list_paginates(test_client: AsyncClient, post_factory):
    for i in range(5):
        await post_factory(title=f"Post {i}")

    response = await test_client.get(API, params={"page": 2, "limit": 2})

    data = response.json()
    assert len(data["posts"]) == 2
    assert data["totalCount"] == 5
    assert data["currentPage"] == 2
    assert data["totalPages"] == 3

@pytest.mark.asyncio
async def test_list_invalid_paging_falls_back(test_client: AsyncClient, post_factory):
    await post_factory()

    response = await test_client.get(API, params={"page": "abc", "limit": 500})

    assert response.status_code == 200
    data = response.json()
    assert data["currentPage"] == 1
    assert data["totalPages"] == 1
    assert len(data["posts"]) == 1

@pytest.mark.asyncio
async def test_list_filters_by_category(test_client: AsyncClient, post_factory, category_factory):
    other = await category_factory("Elsewhere")
    await post_factory(title="Here")
    elsewhere = await post_factory(title="There", category_id=other.id)

    response = await test_client.get(API, params={"categoryId": other.id})

    data = response.json()
    assert [p["id"] for p in data["posts"]] == [elsewhere.id]
    assert data["totalCount"] == 1

@pytest.mark.asyncio
async def test_empty_listing(test_client: AsyncClient):
    response = await test_client.get(API)

    assert response.json() == {"posts": [], "totalCount": 0, "currentPage": 1, "totalPages": 1}

@pytest.mark.asyncio
async def test_get_post_counts_views(test_client: AsyncClient, post_factory):
    post = await post_factory(title="Viewed", slug="viewed")

    first = await test_client.get(f"{API}/viewed")
    second = await test_client.get(f"{API}/viewed")

    assert first.status_code == 200
    assert first.json()["id"] == post.id
    assert first.json()["viewCount"] == 1
    assert second.json()["viewCount"] == 2
    assert second.json()["replies"] == []
    assert second.json()["reactions"] == []
    assert second.json()["replyPages"] == 1

@pytest.mark.asyncio
async def test_get_unknown_post(test_client: AsyncClient):
    response = await test_client.get(f"{API}/does-not-exist")

    assert response.status_code == 404
    assert response.json()["detail"] == "Post not found"

@pytest.mark.asyncio
async def test_unrelated_integrity_error_is_not_retried(test_db, test_user, test_category, monkeypatch):
    author_id, category_id = test_user.id, test_category.id
    service = PostService(test_db)
    attempts = {"n": 0}

    async def failing_commit():
        attempts["n"] += 1
        raise IntegrityError("INSERT INTO forum_posts", {}, Exception("NOT NULL constraint failed"))

    monkeypatch.setattr(test_db, "commit", failing_commit)

    with pytest.raises(IntegrityError):
        await service.create_post(author_id, category_id, "Fresh title", "Body")
    assert attempts["n"] == 1

@pytest.mark.asyncio
async def test_failed_view_increment_still_returns_post(test_client: AsyncClient, post_factory, monkeypatch):
    post = await post_factory(title="Busy", slug="busy")
    real_execute = AsyncSession.execute

    async def execute_without_updates(self, statement, *args, **kwargs):
        if isinstance(statement, Update):
            raise OperationalError("UPDATE forum_posts", {}, Exception("database is locked"))
        return await real_execute(self, statement, *args, **kwargs)

    monkeypatch.setattr(AsyncSession, "execute", execute_without_updates)

    response = await test_client.get(f"{API}/busy")

    assert response.status_code == 200
    assert response.json()["id"] == post.id
    assert response.json()["viewCount"] == 0

@pytest.mark.asyncio
async def test_store_failure_is_internal_error(test_client: AsyncClient, monkeypatch):
    async def broken_listing(self, *args, **kwargs):
        raise OperationalError("SELECT forum_posts", {}, Exception("connection refused"))

    monkeypatch.setattr(PostService, "list_posts", broken_listing)

    response = await test_client.get(API)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}

@pytest.mark.asyncio
async def test_unsupported_method(test_client: AsyncClient):
    response = await test_client.delete(API)

    assert response.status_code == 405
