"""
Content models: categories, posts and their unpublished draft shadows.

A post is the canonical, publicly visible record. A PostDraft holds an
admin's pending edit of one post; its presence means the post has
unpublished changes. At most one draft exists per post.
"""

from enum import Enum

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.models.base import Base


class ContentType(str, Enum):
    """Content kind enum."""

    ARTICLE = "article"
    VIDEO = "video"


class PostStatus(str, Enum):
    """Publication status enum."""

    DRAFT = "draft"
    PUBLISHED = "published"


# Fields an admin edits; shared by Post and PostDraft
EDITABLE_FIELDS = (
    "title",
    "slug",
    "excerpt",
    "content",
    "cover_image",
    "category_id",
    "type",
    "video_url",
    "external_link",
)


class Category(Base):
    """Category of posts. Each category belongs to one content kind."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="article or video",
    )
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "type": self.type,
            "icon": self.icon,
            "sort_order": self.sort_order,
        }

    def __repr__(self) -> str:
        return f"<Category(slug='{self.slug}', type='{self.type}')>"


class Post(Base):
    """Publishable article or video entry."""

    __tablename__ = "posts"

    __table_args__ = (
        Index("ix_posts_type_status", "type", "status"),
        Index("ix_posts_created_at", "created_at"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="URL-friendly identifier",
    )
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Body in Markdown format",
    )
    cover_image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    category_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(
        String(20),
        default=ContentType.ARTICLE.value,
        nullable=False,
        comment="article or video",
    )

    # Only meaningful for videos
    video_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    external_link: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=PostStatus.DRAFT.value,
        nullable=False,
        comment="draft or published",
    )
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    category: Mapped[Category | None] = relationship(lazy="selectin")

    def editable_fields(self) -> dict:
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            **self.editable_fields(),
            "status": self.status,
            "view_count": self.view_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Post(slug='{self.slug}', type='{self.type}', status='{self.status}')>"


class PostDraft(Base):
    """Unpublished edit snapshot shadowing a post."""

    __tablename__ = "post_drafts"

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    category_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    video_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    external_link: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def editable_fields(self) -> dict:
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}

    def __repr__(self) -> str:
        return f"<PostDraft(post_id='{self.post_id}', title='{self.title}')>"
