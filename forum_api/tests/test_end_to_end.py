import pytest
from httpx import AsyncClient

API = "/api/v1/forum"

@pytest.mark.asyncio
async def test_post_reply_react_lifecycle(test_client: AsyncClient, category_factory, user_factory, auth_headers):
    """Category to post to reply to reaction toggle, through the HTTP surface"""
    general = await category_factory("General", display_order=1)
    author = await user_factory("author")
    replier = await user_factory("replier", email_verified=False, mobile_verified=True)

    created = await test_client.post(
        f"{API}/posts",
        json={"title": "Hello World", "content": "First post", "categoryId": general.id},
        headers=auth_headers(author)
    )
    assert created.status_code == 201
    post = created.json()
    assert post["slug"] == "hello-world"

    fetched = await test_client.get(f"{API}/posts/hello-world")
    assert fetched.json()["viewCount"] == 1
    assert fetched.json()["lastReplyAt"] is None

    reply = await test_client.post(
        f"{API}/replies",
        json={"postId": post["id"], "content": "Welcome!"},
        headers=auth_headers(replier)
    )
    assert reply.status_code == 201
    reply_id = reply.json()["id"]

    after_reply = (await test_client.get(f"{API}/posts/hello-world")).json()
    assert after_reply["replyCount"] == 1
    assert after_reply["lastReplyAt"] is not None
    assert after_reply["viewCount"] == 2

    tree = (await test_client.get(f"{API}/categories")).json()
    assert tree[0]["postCount"] == 1

    added = await test_client.post(
        f"{API}/reactions/replies",
        json={"replyId": reply_id, "type": "THANKS"},
        headers=auth_headers(author)
    )
    assert added.status_code == 201
    counts = (await test_client.get(f"{API}/reactions/replies/{reply_id}")).json()
    assert counts["counts"] == {"THANKS": 1}

    removed = await test_client.post(
        f"{API}/reactions/replies",
        json={"replyId": reply_id, "type": "THANKS"},
        headers=auth_headers(author)
    )
    assert removed.json()["action"] == "removed"
    counts = (await test_client.get(f"{API}/reactions/replies/{reply_id}")).json()
    assert counts["counts"] == {}

@pytest.mark.asyncio
async def test_root_endpoint(test_client: AsyncClient):
    response = await test_client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Welcome to Community Forum API"

@pytest.mark.asyncio
async def test_malformed_body_is_bad_request(test_client: AsyncClient, test_user, auth_headers):
    response = await test_client.post(
        f"{API}/posts",
        content="not json",
        headers={**auth_headers(test_user), "Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"
