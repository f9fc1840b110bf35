"""
Draft Service - edit a post without touching its public version, then
promote the edit.

A post is in one of three edit states:

- published, no draft row
- draft, no draft row (created but never saved as a draft)
- pending edit: a PostDraft row exists, whatever the post's own status

`save_draft` upserts the PostDraft keyed on the post id. `publish` writes
the fields onto the post, forces it to published and then deletes the
draft. The two statements are not wrapped in a transaction; if the
delete fails the orphaned draft is logged and left for the next save to
overwrite.
"""

import logging
import re
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from portal.core.exceptions import OperationFailed, ValidationError
from portal.models.base import utcnow
from portal.models.post import ContentType, Post, PostDraft, PostStatus
from portal.services.record_store import RecordStore

logger = logging.getLogger(__name__)

_url_adapter = TypeAdapter(AnyUrl)

URL_FIELDS = {
    "cover_image": "Cover image URL is not a valid URL",
    "video_url": "Video embed URL is not a valid URL",
    "external_link": "External link is not a valid URL",
}


class PostFields(BaseModel):
    """Editable fields of a post as submitted by the admin form."""

    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    cover_image: str = ""
    category_id: str = ""
    type: ContentType = ContentType.ARTICLE
    video_url: str = ""
    external_link: str = ""

    @classmethod
    def from_record(cls, record: Post | PostDraft) -> "PostFields":
        values = {
            name: value
            for name, value in record.editable_fields().items()
            if value is not None
        }
        return cls(**values)

    def to_values(self) -> dict:
        """Column values: strings trimmed, optional blanks stored as NULL."""
        values = {}
        for name, value in self.model_dump(mode="json").items():
            if isinstance(value, str):
                value = value.strip()
            if value == "" and name not in ("title", "slug"):
                value = None
            values[name] = value
        return values


class NewPost(PostFields):
    """Fields for a brand new post, including its initial status."""

    status: PostStatus = PostStatus.DRAFT


class Published(BaseModel):
    """Published post without pending edits."""

    state: Literal["published"] = "published"
    post_id: str
    post: PostFields

    @property
    def editable(self) -> PostFields:
        return self.post

    @property
    def has_pending_edit(self) -> bool:
        return False


class Draft(BaseModel):
    """Unpublished post without pending edits."""

    state: Literal["draft"] = "draft"
    post_id: str
    post: PostFields

    @property
    def editable(self) -> PostFields:
        return self.post

    @property
    def has_pending_edit(self) -> bool:
        return False


class PendingEdit(BaseModel):
    """Post with a saved draft that has not been published yet."""

    state: Literal["pending_edit"] = "pending_edit"
    post_id: str
    status: PostStatus
    published: PostFields
    pending: PostFields
    draft_updated_at: datetime | None = None

    @property
    def editable(self) -> PostFields:
        return self.pending

    @property
    def has_pending_edit(self) -> bool:
        return True


PostEditState = Annotated[
    Union[Published, Draft, PendingEdit],
    Field(discriminator="state"),
]


def is_valid_url(value: str) -> bool:
    """True for a syntactically valid absolute URL."""
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def check_urls(fields: PostFields) -> None:
    """Reject malformed URL-shaped fields; blanks are allowed."""
    for name, message in URL_FIELDS.items():
        value = getattr(fields, name).strip()
        if value and not is_valid_url(value):
            raise ValidationError(message, field=name)


def check_required(fields: PostFields) -> None:
    """Validate a complete post before it is created or published."""
    if not fields.title.strip():
        raise ValidationError("Title is required", field="title")
    if not fields.slug.strip():
        raise ValidationError("Slug is required", field="slug")
    if not fields.category_id.strip():
        raise ValidationError("Category is required", field="category_id")
    if not fields.cover_image.strip():
        raise ValidationError("Cover image URL is required", field="cover_image")
    if not fields.excerpt.strip():
        raise ValidationError("Excerpt is required", field="excerpt")
    if not fields.content.strip():
        if fields.type == ContentType.VIDEO:
            raise ValidationError("Video description is required", field="content")
        raise ValidationError("Article content is required", field="content")
    check_urls(fields)


def generate_slug(title: str) -> str:
    """Suggest a URL slug for `title`."""
    slug = title.lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    return slug[:50]


class DraftService:
    """Draft/publish workflow for posts."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def load(self, post_id: str) -> PostEditState:
        """Current edit state of a post; drafts win over the post's own fields."""
        post = await self.store.get(Post, post_id)
        draft = await self.store.find(PostDraft, PostDraft.post_id == post_id)

        if draft is not None:
            return PendingEdit(
                post_id=post.id,
                status=post.status,
                published=PostFields.from_record(post),
                pending=PostFields.from_record(draft),
                draft_updated_at=draft.updated_at,
            )
        if post.status == PostStatus.PUBLISHED.value:
            return Published(post_id=post.id, post=PostFields.from_record(post))
        return Draft(post_id=post.id, post=PostFields.from_record(post))

    async def save_draft(self, post_id: str, fields: PostFields) -> PostDraft:
        """Create or overwrite the single draft of a post."""
        check_urls(fields)
        await self.store.get(Post, post_id)

        await self.store.upsert(
            PostDraft,
            {"post_id": post_id, **fields.to_values(), "updated_at": utcnow()},
            conflict_key="post_id",
        )
        logger.info(f"Saved draft for post {post_id}")
        return await self.store.find(PostDraft, PostDraft.post_id == post_id)

    async def discard_draft(self, post_id: str) -> bool:
        """Drop a post's draft. Returns whether one existed."""
        removed = await self.store.delete_where(PostDraft, PostDraft.post_id == post_id)
        return removed > 0

    async def publish(self, post_id: str, fields: PostFields) -> Post:
        """Write `fields` onto the post, mark it published and drop its draft."""
        check_required(fields)

        await self.store.update(
            Post,
            post_id,
            {
                **fields.to_values(),
                "status": PostStatus.PUBLISHED.value,
                "updated_at": utcnow(),
            },
        )

        try:
            await self.store.delete_where(PostDraft, PostDraft.post_id == post_id)
        except OperationFailed as e:
            logger.warning(f"Published post {post_id} but could not remove its draft: {e}")

        logger.info(f"Published post {post_id}")
        return await self.store.get(Post, post_id)

    async def create_new(self, fields: NewPost) -> Post:
        """Insert a new post with the submitted status; no draft is created."""
        check_required(fields)

        values = fields.to_values()
        post = await self.store.insert(Post, values)
        logger.info(f"Created post {post.id} ({post.type}, {post.status})")
        return post
