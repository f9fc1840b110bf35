"""
Content Tests for Hive Portal.

Tests for:
- Public listings, detail views and view counting
- Previous/next navigation
- Search, categories and the sitemap
- Admin post index, status toggle and delete
"""

import pytest
from sqlalchemy import func, select

from portal.core.config import get_settings
from portal.core.exceptions import RecordNotFound
from portal.models import Post, PostDraft
from portal.services.draft_service import PostFields

from tests.backend.helpers import article_fields


# ============== Public Listings ==============

class TestPublicListing:
    """Tests for ContentService.list_published."""

    @pytest.mark.asyncio
    async def test_lists_only_published_of_type(self, content, make_post):
        older = await make_post()
        newer = await make_post()
        await make_post(status="draft")
        await make_post(type="video", category_id="c2")

        page = await content.list_published("article")

        assert [p.id for p in page.rows] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_filter_by_category_slug(self, content, make_post):
        clip = await make_post(type="video", category_id="c2")
        await make_post(type="video", category_id=None)

        page = await content.list_published("video", category_slug="clips")

        assert [p.id for p in page.rows] == [clip.id]
        assert page.rows[0].category.slug == "clips"

    @pytest.mark.asyncio
    async def test_unknown_category_slug_is_empty(self, content, make_post):
        await make_post()

        page = await content.list_published("article", category_slug="nope")

        assert page.rows == []
        assert page.total_count == 0

    @pytest.mark.asyncio
    async def test_pagination(self, content, make_post):
        posts = [await make_post() for _ in range(3)]

        page = await content.list_published("article", page=2, page_size=2)

        assert page.total_count == 3
        assert [p.id for p in page.rows] == [posts[0].id]


# ============== Detail ==============

class TestDetail:
    """Tests for ContentService.get_published and adjacent."""

    @pytest.mark.asyncio
    async def test_detail_counts_a_view(self, content, make_post):
        post = await make_post()

        first = await content.get_published(post.id, "article")
        assert first.view_count == 1

        second = await content.get_published(post.id, "article")
        assert second.view_count == 2

    @pytest.mark.asyncio
    async def test_draft_post_is_not_found(self, content, store, make_post):
        """Unpublished posts are hidden and their views are not counted."""
        post = await make_post(status="draft")

        with pytest.raises(RecordNotFound):
            await content.get_published(post.id, "article")

        stored = await store.get(Post, post.id)
        assert stored.view_count == 0

    @pytest.mark.asyncio
    async def test_wrong_type_is_not_found(self, content, make_post):
        video = await make_post(type="video", category_id="c2")

        with pytest.raises(RecordNotFound):
            await content.get_published(video.id, "article")

    @pytest.mark.asyncio
    async def test_detail_shows_published_fields_not_draft(self, content, drafts, make_post):
        """Readers never see a pending edit."""
        post = await make_post(title="公开标题")
        await drafts.save_draft(post.id, PostFields(**article_fields(title="草稿标题")))

        shown = await content.get_published(post.id, "article")

        assert shown.title == "公开标题"

    @pytest.mark.asyncio
    async def test_view_does_not_touch_updated_at(self, content, store, make_post):
        """Counting a view is not an edit; updated_at and the sitemap lastmod stay put."""
        post = await make_post()
        before = post.updated_at

        await content.get_published(post.id, "article")

        stored = await store.get(Post, post.id)
        assert stored.view_count == 1
        assert stored.updated_at == before

    @pytest.mark.asyncio
    async def test_adjacent_posts(self, content, make_post):
        first = await make_post()
        await make_post(status="draft")
        middle = await make_post()
        await make_post(type="video", category_id="c2")
        last = await make_post()

        adjacent = await content.adjacent(middle)

        assert adjacent.previous.id == first.id
        assert adjacent.next.id == last.id

    @pytest.mark.asyncio
    async def test_adjacent_at_edges(self, content, make_post):
        only = await make_post()

        adjacent = await content.adjacent(only)

        assert adjacent.previous is None
        assert adjacent.next is None


# ============== Search ==============

class TestSearch:
    """Tests for ContentService.search."""

    @pytest.mark.asyncio
    async def test_search_title_excerpt_and_content(self, content, make_post):
        by_title = await make_post(title="社区花园改造")
        by_excerpt = await make_post(excerpt="关于花园的摘要")
        by_content = await make_post(content="正文提到了花园")
        await make_post(title="无关")

        results = await content.search("花园")

        assert {p.id for p in results} == {by_title.id, by_excerpt.id, by_content.id}

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, content, make_post):
        post = await make_post(title="Open Day at the Hive")

        results = await content.search("open day")

        assert [p.id for p in results] == [post.id]

    @pytest.mark.asyncio
    async def test_search_skips_drafts(self, content, make_post):
        await make_post(title="花园草稿", status="draft")

        assert await content.search("花园") == []

    @pytest.mark.asyncio
    async def test_blank_query_returns_nothing(self, content, make_post):
        await make_post()

        assert await content.search("   ") == []

    @pytest.mark.asyncio
    async def test_underscore_is_literal(self, content, make_post):
        await make_post(title="axb report")
        literal = await make_post(title="a_b report")

        results = await content.search("a_b")

        assert [p.id for p in results] == [literal.id]

    @pytest.mark.asyncio
    async def test_percent_is_literal(self, content, make_post):
        await make_post(title="满意度调查")
        literal = await make_post(title="满意度 100%")

        results = await content.search("%")

        assert [p.id for p in results] == [literal.id]


# ============== Quick Search ==============

class TestQuickSearch:
    """Tests for ContentService.quick_search."""

    @pytest.mark.asyncio
    async def test_caps_at_five_newest(self, content, make_post):
        posts = [await make_post(title=f"花园 {n}") for n in range(7)]
        await make_post(title="花园草稿", status="draft")

        results = await content.quick_search("花园")

        assert [p.id for p in results] == [p.id for p in reversed(posts)][:5]

    @pytest.mark.asyncio
    async def test_short_query_returns_nothing(self, content, make_post):
        await make_post(title="花园")

        assert await content.quick_search(" 花 ") == []
        assert len(await content.quick_search(" 花园 ")) == 1


# ============== Categories & Sitemap ==============

class TestCategoriesAndSitemap:

    @pytest.mark.asyncio
    async def test_categories_sorted_and_filtered(self, content, categories):
        all_categories = await content.list_categories()
        videos = await content.list_categories("video")

        assert [c.id for c in all_categories] == ["c2", "c1"]
        assert [c.id for c in videos] == ["c2"]

    @pytest.mark.asyncio
    async def test_sitemap_lists_sections_and_published_posts(self, content, make_post):
        article = await make_post(slug="garden")
        video = await make_post(slug="open-day", type="video", category_id="c2")
        await make_post(slug="hidden", status="draft")

        urls = [entry.url for entry in await content.sitemap_entries()]

        assert urls[0] == get_settings().site_url
        assert any(url.endswith("/wishlist") for url in urls)
        assert any(url.endswith(f"/posts/{article.slug}") for url in urls)
        assert any(url.endswith(f"/videos/{video.slug}") for url in urls)
        assert not any(url.endswith("/hidden") for url in urls)


# ============== Admin ==============

class TestAdminPosts:
    """Tests for the admin post index and quick actions."""

    @pytest.mark.asyncio
    async def test_list_posts_includes_drafts(self, content, make_post):
        await make_post()
        await make_post(status="draft")

        page = await content.list_posts()
        drafts_only = await content.list_posts(status="draft")

        assert page.total_count == 2
        assert drafts_only.total_count == 1

    @pytest.mark.asyncio
    async def test_list_posts_search_title_or_slug(self, content, make_post):
        by_slug = await make_post(slug="spring-fair")
        by_title = await make_post(title="Spring cleaning")
        await make_post()

        page = await content.list_posts(q="spring")

        assert {p.id for p in page.rows} == {by_slug.id, by_title.id}

    @pytest.mark.asyncio
    async def test_toggle_status(self, content, make_post):
        post = await make_post()

        assert (await content.toggle_status(post.id)).status == "draft"
        assert (await content.toggle_status(post.id)).status == "published"

    @pytest.mark.asyncio
    async def test_toggle_missing_post(self, content):
        with pytest.raises(RecordNotFound):
            await content.toggle_status("ghost")

    @pytest.mark.asyncio
    async def test_delete_post_removes_draft(self, content, drafts, db, make_post):
        post = await make_post()
        await drafts.save_draft(post.id, PostFields(**article_fields(title="草稿")))

        await content.delete_post(post.id)

        result = await db.execute(select(func.count()).select_from(PostDraft))
        assert result.scalar_one() == 0
        with pytest.raises(RecordNotFound):
            await content.delete_post(post.id)
