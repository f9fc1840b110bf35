"""
Content Service - published posts for the public site and post
management for the admin index.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import asc, case, desc

from portal.core.config import get_settings
from portal.core.exceptions import RecordNotFound
from portal.models.base import utcnow
from portal.models.post import Category, ContentType, Post, PostStatus
from portal.services.record_store import Page, RecordStore, text_match

logger = logging.getLogger(__name__)
settings = get_settings()

STATIC_SECTIONS = ("", "/works", "/services", "/wishlist")


@dataclass
class AdjacentPosts:
    previous: Optional[Post] = None
    next: Optional[Post] = None


@dataclass
class SitemapEntry:
    url: str
    last_modified: datetime
    change_frequency: str
    priority: float


class ContentService:
    """Reads and simple mutations on posts and categories."""

    def __init__(self, store: RecordStore):
        self.store = store

    # ==================== Public ====================

    async def list_published(
        self,
        content_type: ContentType,
        category_slug: Optional[str] = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> Page[Post]:
        criteria = [
            Post.type == ContentType(content_type).value,
            Post.status == PostStatus.PUBLISHED.value,
        ]
        if category_slug:
            category = await self.store.find(Category, Category.slug == category_slug)
            if category is None:
                return Page(page=page, page_size=page_size or 0)
            criteria.append(Post.category_id == category.id)

        return await self.store.list(
            Post,
            *criteria,
            order_by=[desc(Post.created_at)],
            page=page,
            page_size=page_size,
        )

    async def get_published(self, post_id: str, content_type: ContentType) -> Post:
        """Published post of the given type; counts one view."""
        post = await self.store.get(Post, post_id)
        if post.type != ContentType(content_type).value or post.status != PostStatus.PUBLISHED.value:
            # Unpublished or wrong-kind posts look exactly like missing ones
            raise RecordNotFound(Post.__name__, post_id)

        # Single statement, no dedup: concurrent renders may both count.
        # updated_at is pinned so a view does not count as an edit.
        await self.store.update_where(
            Post,
            {"view_count": Post.view_count + 1, "updated_at": Post.updated_at},
            Post.id == post.id,
        )
        return await self.store.get(Post, post_id)

    async def adjacent(self, post: Post) -> AdjacentPosts:
        """Previous (older) and next (newer) published posts of the same type."""
        same_kind = (
            Post.type == post.type,
            Post.status == PostStatus.PUBLISHED.value,
        )
        older = await self.store.list(
            Post,
            *same_kind,
            Post.created_at < post.created_at,
            order_by=[desc(Post.created_at)],
            page_size=1,
        )
        newer = await self.store.list(
            Post,
            *same_kind,
            Post.created_at > post.created_at,
            order_by=[asc(Post.created_at)],
            page_size=1,
        )
        return AdjacentPosts(
            previous=older.rows[0] if older.rows else None,
            next=newer.rows[0] if newer.rows else None,
        )

    async def search(self, q: str) -> List[Post]:
        """Published posts whose title, excerpt or content contains `q`."""
        term = (q or "").strip()
        if not term:
            return []

        result = await self.store.list(
            Post,
            Post.status == PostStatus.PUBLISHED.value,
            text_match(term, Post.title, Post.excerpt, Post.content),
            order_by=[desc(Post.created_at)],
        )
        return result.rows

    async def quick_search(self, q: str) -> List[Post]:
        """First few matches of `search`, once the query is long enough."""
        term = (q or "").strip()
        if len(term) < settings.quick_search_min_length:
            return []

        result = await self.store.list(
            Post,
            Post.status == PostStatus.PUBLISHED.value,
            text_match(term, Post.title, Post.excerpt, Post.content),
            order_by=[desc(Post.created_at)],
            page_size=settings.quick_search_post_limit,
        )
        return result.rows

    async def list_categories(self, content_type: Optional[ContentType] = None) -> List[Category]:
        criteria = []
        if content_type:
            criteria.append(Category.type == ContentType(content_type).value)
        result = await self.store.list(
            Category, *criteria, order_by=[asc(Category.sort_order)]
        )
        return result.rows

    async def sitemap_entries(self) -> List[SitemapEntry]:
        now = utcnow()
        entries = [
            SitemapEntry(
                url=f"{settings.site_url}{path}",
                last_modified=now,
                change_frequency="daily",
                priority=1.0 if path == "" else 0.8,
            )
            for path in STATIC_SECTIONS
        ]

        result = await self.store.list(
            Post,
            Post.status == PostStatus.PUBLISHED.value,
            order_by=[desc(Post.updated_at)],
        )
        for post in result.rows:
            section = "videos" if post.type == ContentType.VIDEO.value else "posts"
            entries.append(
                SitemapEntry(
                    url=f"{settings.site_url}/{section}/{post.slug or post.id}",
                    last_modified=post.updated_at,
                    change_frequency="weekly",
                    priority=0.6,
                )
            )
        return entries

    # ==================== Admin ====================

    async def list_posts(
        self,
        content_type: Optional[ContentType] = None,
        status: Optional[PostStatus] = None,
        q: Optional[str] = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> Page[Post]:
        """All posts, drafts included, newest first."""
        criteria = []
        if content_type:
            criteria.append(Post.type == ContentType(content_type).value)
        if status:
            criteria.append(Post.status == PostStatus(status).value)
        if q and q.strip():
            criteria.append(text_match(q.strip(), Post.title, Post.slug))

        return await self.store.list(
            Post,
            *criteria,
            order_by=[desc(Post.created_at)],
            page=page,
            page_size=page_size or settings.admin_page_size,
        )

    async def toggle_status(self, post_id: str) -> Post:
        """Flip published <-> draft in a single update."""
        flipped = case(
            (Post.status == PostStatus.PUBLISHED.value, PostStatus.DRAFT.value),
            else_=PostStatus.PUBLISHED.value,
        )
        await self.store.update(Post, post_id, {"status": flipped, "updated_at": utcnow()})
        post = await self.store.get(Post, post_id)
        logger.info(f"Post {post_id} is now {post.status}")
        return post

    async def delete_post(self, post_id: str) -> None:
        await self.store.delete(Post, post_id)
        logger.info(f"Deleted post {post_id}")
