"""
Public Content API Routes - articles, videos, search and sitemap.
"""

from typing import Annotated, Literal, Optional, Union

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from portal.api.schemas import CategoryResponse, PostListResponse, PostResponse
from portal.core.config import get_settings
from portal.core.dependencies import Content, Wishes
from portal.models.post import ContentType, Post
from portal.models.wishlist import Wishlist
from portal.services.content_service import ContentService

router = APIRouter()
settings = get_settings()


class AdjacentPostLink(BaseModel):
    id: str
    title: str


class PostDetailResponse(BaseModel):
    post: PostResponse
    previous: AdjacentPostLink | None = None
    next: AdjacentPostLink | None = None


class SearchResponse(BaseModel):
    query: str
    posts: list[PostResponse]
    total: int


class PostHit(BaseModel):
    source: Literal["post"] = "post"
    id: str
    title: str
    excerpt: str | None
    type: str
    cover_image: str | None

    @classmethod
    def from_post(cls, post: Post) -> "PostHit":
        return cls(
            id=post.id,
            title=post.title,
            excerpt=post.excerpt,
            type=post.type,
            cover_image=post.cover_image,
        )


class WishlistHit(BaseModel):
    """Search box entry for a ticket; contact fields stay out."""

    source: Literal["wishlist"] = "wishlist"
    id: str
    title: str
    content: str
    category: str
    status: str

    @classmethod
    def from_ticket(cls, ticket: Wishlist) -> "WishlistHit":
        return cls(
            id=ticket.id,
            title=ticket.title,
            content=ticket.content,
            category=ticket.category,
            status=ticket.status,
        )


SearchHit = Annotated[Union[PostHit, WishlistHit], Field(discriminator="source")]


class QuickSearchResponse(BaseModel):
    query: str
    results: list[SearchHit]


class SitemapEntryResponse(BaseModel):
    url: str
    last_modified: str
    change_frequency: str
    priority: float


def _link(post: Post | None) -> AdjacentPostLink | None:
    return AdjacentPostLink(id=post.id, title=post.title) if post else None


async def _list(
    service: ContentService,
    content_type: ContentType,
    category: Optional[str],
    page: int,
    page_size: int,
) -> PostListResponse:
    result = await service.list_published(content_type, category, page, page_size)
    return PostListResponse(
        posts=[PostResponse.from_post(p, p.category) for p in result.rows],
        total=result.total_count,
        page=page,
        page_size=page_size,
    )


async def _detail(service: ContentService, post_id: str, content_type: ContentType) -> PostDetailResponse:
    post = await service.get_published(post_id, content_type)
    adjacent = await service.adjacent(post)
    return PostDetailResponse(
        post=PostResponse.from_post(post, post.category),
        previous=_link(adjacent.previous),
        next=_link(adjacent.next),
    )


@router.get("/posts", response_model=PostListResponse)
async def list_articles(
    service: Content,
    category: Optional[str] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=settings.max_page_size)] = 20,
) -> PostListResponse:
    """Published articles, newest first."""
    return await _list(service, ContentType.ARTICLE, category, page, page_size)


@router.get("/posts/{post_id}", response_model=PostDetailResponse)
async def get_article(post_id: str, service: Content) -> PostDetailResponse:
    """A published article with links to its neighbours. Counts one view."""
    return await _detail(service, post_id, ContentType.ARTICLE)


@router.get("/videos", response_model=PostListResponse)
async def list_videos(
    service: Content,
    category: Optional[str] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=settings.max_page_size)] = 20,
) -> PostListResponse:
    """Published videos, newest first."""
    return await _list(service, ContentType.VIDEO, category, page, page_size)


@router.get("/videos/{post_id}", response_model=PostDetailResponse)
async def get_video(post_id: str, service: Content) -> PostDetailResponse:
    """A published video with links to its neighbours. Counts one view."""
    return await _detail(service, post_id, ContentType.VIDEO)


@router.get("/search", response_model=SearchResponse)
async def search(service: Content, q: str = "") -> SearchResponse:
    """Case-insensitive substring search over published posts."""
    posts = await service.search(q)
    return SearchResponse(
        query=q,
        posts=[PostResponse.from_post(p, p.category) for p in posts],
        total=len(posts),
    )


@router.get("/search/quick", response_model=QuickSearchResponse)
async def quick_search(content: Content, wishes: Wishes, q: str = "") -> QuickSearchResponse:
    """
    Search-as-you-type results: a few published posts, then a few
    wishlist tickets. Queries shorter than `quick_search_min_length`
    characters (after trimming) return nothing.
    """
    posts = await content.quick_search(q)
    tickets = await wishes.quick_search(q)
    return QuickSearchResponse(
        query=q,
        results=[PostHit.from_post(p) for p in posts]
        + [WishlistHit.from_ticket(t) for t in tickets],
    )


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    service: Content,
    type: Optional[ContentType] = None,
) -> list[CategoryResponse]:
    categories = await service.list_categories(type)
    return [CategoryResponse.from_category(c) for c in categories]


@router.get("/sitemap", response_model=list[SitemapEntryResponse])
async def sitemap(service: Content) -> list[SitemapEntryResponse]:
    entries = await service.sitemap_entries()
    return [
        SitemapEntryResponse(
            url=e.url,
            last_modified=e.last_modified.isoformat(),
            change_frequency=e.change_frequency,
            priority=e.priority,
        )
        for e in entries
    ]
