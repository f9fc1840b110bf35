"""
Shared fixtures for Hive Portal backend tests.

Every test gets its own in-memory SQLite database with foreign keys
enforced, so ON DELETE CASCADE behaves as it does on PostgreSQL.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from portal.models import Base, Category, Post
from portal.services.content_service import ContentService
from portal.services.draft_service import DraftService, NewPost
from portal.services.record_store import RecordStore
from portal.services.wishlist_service import WishlistService

from tests.backend.helpers import BASE_TIME, article_fields


# ============== Database Fixtures ==============

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db):
    return RecordStore(db)


# ============== Service Fixtures ==============

@pytest.fixture
def drafts(store):
    return DraftService(store)


@pytest.fixture
def wishes(store):
    return WishlistService(store)


@pytest.fixture
def content(store):
    return ContentService(store)


# ============== Data Fixtures ==============

@pytest_asyncio.fixture
async def categories(store):
    """One article category ("c1") and one video category ("c2")."""
    news = await store.insert(
        Category,
        {"id": "c1", "name": "社区动态", "slug": "news", "type": "article", "sort_order": 2},
    )
    clips = await store.insert(
        Category,
        {"id": "c2", "name": "活动视频", "slug": "clips", "type": "video", "sort_order": 1},
    )
    return news, clips


@pytest.fixture
def make_post(store, categories):
    """
    Factory inserting a post directly, bypassing validation.

    Posts get increasing created_at values in creation order so that
    ordering assertions do not depend on clock resolution.
    """
    counter = {"n": 0}

    async def _make(**overrides) -> Post:
        counter["n"] += 1
        n = counter["n"]
        values = {
            **article_fields(slug=f"post-{n}", title=f"文章 {n}"),
            "status": "published",
            "created_at": BASE_TIME + timedelta(hours=n),
            "updated_at": BASE_TIME + timedelta(hours=n),
        }
        values.update(overrides)
        return await store.insert(Post, values)

    return _make


@pytest_asyncio.fixture
async def new_article(drafts, categories):
    """An unpublished article created through the draft service."""
    return await drafts.create_new(NewPost(**article_fields(), status="draft"))
