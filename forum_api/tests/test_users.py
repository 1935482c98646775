import pytest
from httpx import AsyncClient

from forum_api.models.reaction import Reaction
from forum_api.models.reply import Reply

API = "/api/v1/forum/users"

@pytest.mark.asyncio
async def test_user_activity(test_client: AsyncClient, test_db, post_factory, test_user, other_user):
    first = await post_factory(title="First")
    second = await post_factory(title="Second")
    await post_factory(title="Not mine", author_id=other_user.id)
    test_db.add(Reply(post_id=first.id, author_id=test_user.id, content="Bump"))
    await test_db.commit()

    response = await test_client.get(f"{API}/{test_user.id}/posts")

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["username"] == "testuser"
    assert [p["id"] for p in data["posts"]] == [second.id, first.id]
    assert data["postsCount"] == 2
    assert data["repliesCount"] == 1
    assert data["replies"][0]["post"]["slug"] == first.slug
    assert data["totalPages"] == 1

@pytest.mark.asyncio
async def test_user_activity_unknown_user(test_client: AsyncClient):
    response = await test_client.get(f"{API}/777/posts")

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"

@pytest.mark.asyncio
async def test_user_stats(test_client: AsyncClient, test_db, post_factory, test_user, other_user):
    post = await post_factory()
    reply = Reply(post_id=post.id, author_id=test_user.id, content="Self reply")
    test_db.add(reply)
    await test_db.commit()
    test_db.add_all([
        Reaction(target_type="POST", target_id=post.id, user_id=other_user.id, type="THANKS"),
        Reaction(target_type="REPLY", target_id=reply.id, user_id=other_user.id, type="THANKS"),
        Reaction(target_type="POST", target_id=post.id, user_id=test_user.id, type="LOVE"),
    ])
    await test_db.commit()

    mine = (await test_client.get(f"{API}/{test_user.id}/stats")).json()
    theirs = (await test_client.get(f"{API}/{other_user.id}/stats")).json()

    assert mine["postCount"] == 1
    assert mine["replyCount"] == 1
    assert mine["totalPosts"] == 2
    assert mine["reactionsReceived"]["THANKS"] == 2
    assert mine["reactionsReceived"]["LOVE"] == 1
    assert mine["reactionsReceived"]["SAD"] == 0
    assert mine["totalReactionsReceived"] == 3
    assert mine["reactionsGiven"] == {
        "THANKS": 0, "LAUGH": 0, "CONFUSED": 0, "SAD": 0, "ANGRY": 0, "LOVE": 1
    }
    assert theirs["totalReactionsGiven"] == 2
    assert theirs["totalReactionsReceived"] == 0
