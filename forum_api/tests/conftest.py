import os

# Must be set before forum_api.config is imported
os.environ["ENVIRONMENT"] = "testing"

import pytest
from typing import AsyncGenerator, Callable, Awaitable, Dict
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from forum_api.config import settings
from forum_api.db.session import get_db
from forum_api.main import app
from forum_api.models import Base, User, Category, Post

# Test database URL - in-memory SQLite
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()

@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to arrange and inspect data"""
    async with session_factory() as session:
        yield session

@pytest.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test database"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

def make_token(user_id: int, **claims) -> str:
    payload = {"sub": str(user_id), **claims}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.ALGORITHM)

@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Bearer header for a user, as issued by the marketplace login"""
    def headers(user: User, **claims) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user.id, **claims)}"}

    return headers

@pytest.fixture
def user_factory(test_db: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def create(username: str, email_verified: bool = True, mobile_verified: bool = False) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            email_verified=email_verified,
            mobile_verified=mobile_verified,
        )
        test_db.add(user)
        await test_db.commit()
        return user

    return create

@pytest.fixture
async def test_user(user_factory) -> User:
    """Email-verified user allowed to post"""
    return await user_factory("testuser")

@pytest.fixture
async def other_user(user_factory) -> User:
    return await user_factory("otheruser", email_verified=False, mobile_verified=True)

@pytest.fixture
async def unverified_user(user_factory) -> User:
    return await user_factory("newcomer", email_verified=False)

@pytest.fixture
def category_factory(test_db: AsyncSession) -> Callable[..., Awaitable[Category]]:
    async def create(name: str, parent: Category = None, **fields) -> Category:
        category = Category(
            name=name,
            slug=fields.pop("slug", name.lower().replace(" ", "-")),
            parent_id=parent.id if parent else None,
            **fields
        )
        test_db.add(category)
        await test_db.commit()
        return category

    return create

@pytest.fixture
async def test_category(category_factory) -> Category:
    root = await category_factory("General Discussions", display_order=3)
    city = await category_factory("Pune", parent=root, city="pune", display_order=8)
    return await category_factory(
        "Villas in Pune",
        parent=city,
        slug="pune-villas",
        city="pune",
        property_type="VILLAS",
        description="Discuss villas in Pune",
    )

@pytest.fixture
def post_factory(test_db: AsyncSession, test_user: User, test_category: Category) -> Callable[..., Awaitable[Post]]:
    """Inserts posts directly, bypassing slug generation"""
    counter = {"n": 0}

    async def create(title: str = "A post", content: str = "Body", **fields) -> Post:
        counter["n"] += 1
        post = Post(
            title=title,
            content=content,
            slug=fields.pop("slug", f"post-{counter['n']}"),
            category_id=fields.pop("category_id", test_category.id),
            author_id=fields.pop("author_id", test_user.id),
            **fields
        )
        test_db.add(post)
        await test_db.commit()
        return post

    return create
