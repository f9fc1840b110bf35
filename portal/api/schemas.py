"""
Response models shared by the public and admin routers.
"""

from pydantic import BaseModel

from portal.models.post import Category, Post
from portal.models.wishlist import Wishlist, WishlistNote


def _iso(value) -> str:
    return value.isoformat() if value else ""


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    type: str
    icon: str | None
    sort_order: int

    @classmethod
    def from_category(cls, category: Category) -> "CategoryResponse":
        return cls(**category.to_dict())


class PostResponse(BaseModel):
    """A post as seen by readers and by the admin index."""

    id: str
    title: str
    slug: str
    excerpt: str | None
    content: str | None
    cover_image: str | None
    category_id: str | None
    type: str
    video_url: str | None
    external_link: str | None
    status: str
    view_count: int
    created_at: str
    updated_at: str
    category: CategoryResponse | None = None

    @classmethod
    def from_post(cls, post: Post, category: Category | None = None) -> "PostResponse":
        data = post.to_dict()
        data["created_at"] = _iso(post.created_at)
        data["updated_at"] = _iso(post.updated_at)
        return cls(
            **data,
            category=CategoryResponse.from_category(category) if category else None,
        )


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    total: int
    page: int
    page_size: int


class WishlistPublicResponse(BaseModel):
    """A ticket on the public wall; contact details are never exposed."""

    id: str
    title: str
    content: str
    category: str
    category_label: str
    status: str
    status_label: str
    priority: str
    priority_label: str
    admin_reply: str | None
    replied_at: str | None
    created_at: str | None

    @classmethod
    def from_ticket(cls, ticket: Wishlist) -> "WishlistPublicResponse":
        return cls(**ticket.to_public_dict())


class WishlistResponse(WishlistPublicResponse):
    contact_name: str | None
    contact_phone: str | None
    contact_email: str | None

    @classmethod
    def from_ticket(cls, ticket: Wishlist) -> "WishlistResponse":
        return cls(**ticket.to_dict())


class WishlistNoteResponse(BaseModel):
    id: str
    wishlist_id: str
    content: str
    created_at: str | None

    @classmethod
    def from_note(cls, note: WishlistNote) -> "WishlistNoteResponse":
        return cls(**note.to_dict())


class MessageResponse(BaseModel):
    message: str
