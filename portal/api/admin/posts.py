"""
Admin Post Endpoints - post management and the draft/publish workflow.

Provides:
- Post index with filters, status toggle and delete
- Create, load, save-draft, discard-draft and publish
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from portal.api.schemas import MessageResponse, PostListResponse, PostResponse
from portal.core.config import get_settings
from portal.core.dependencies import Content, Drafts
from portal.models.post import ContentType, PostStatus
from portal.services.draft_service import (
    NewPost,
    PostEditState,
    PostFields,
    generate_slug,
)

router = APIRouter(prefix="/posts", tags=["Admin Posts"])
settings = get_settings()


class DraftResponse(BaseModel):
    post_id: str
    updated_at: str
    draft: PostFields


class SlugResponse(BaseModel):
    slug: str


# ============== Index ==============


@router.get("", response_model=PostListResponse)
async def list_posts(
    service: Content,
    type: Optional[ContentType] = None,
    status: Optional[PostStatus] = None,
    q: Optional[str] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.admin_page_size,
) -> PostListResponse:
    """All posts including drafts, newest first."""
    result = await service.list_posts(type, status, q, page, page_size)
    return PostListResponse(
        posts=[PostResponse.from_post(p) for p in result.rows],
        total=result.total_count,
        page=page,
        page_size=page_size,
    )


@router.get("/slug", response_model=SlugResponse)
async def suggest_slug(title: str) -> SlugResponse:
    """Slug suggestion for a title, for the editor's auto-fill."""
    return SlugResponse(slug=generate_slug(title))


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(data: NewPost, service: Drafts) -> PostResponse:
    """Create a post as draft or published. No draft row is created."""
    post = await service.create_new(data)
    return PostResponse.from_post(post)


@router.post("/{post_id}/toggle-status", response_model=PostResponse)
async def toggle_status(post_id: str, service: Content) -> PostResponse:
    """Flip a post between published and draft."""
    post = await service.toggle_status(post_id)
    return PostResponse.from_post(post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, service: Content) -> MessageResponse:
    """Delete a post and any draft it has. Cannot be undone."""
    await service.delete_post(post_id)
    return MessageResponse(message=f"Post '{post_id}' deleted")


# ============== Draft Workflow ==============


@router.get("/{post_id}", response_model=PostEditState)
async def load_post(post_id: str, service: Drafts):
    """Edit state of a post. When a draft exists its fields are the editable ones."""
    return await service.load(post_id)


@router.put("/{post_id}/draft", response_model=DraftResponse)
async def save_draft(post_id: str, data: PostFields, service: Drafts) -> DraftResponse:
    """Save the edit as a draft without changing the public post."""
    draft = await service.save_draft(post_id, data)
    return DraftResponse(
        post_id=draft.post_id,
        updated_at=draft.updated_at.isoformat(),
        draft=PostFields.from_record(draft),
    )


@router.delete("/{post_id}/draft", response_model=MessageResponse)
async def discard_draft(post_id: str, service: Drafts) -> MessageResponse:
    """Throw away a post's unpublished edits."""
    removed = await service.discard_draft(post_id)
    return MessageResponse(message="Draft discarded" if removed else "No draft to discard")


@router.post("/{post_id}/publish", response_model=PostResponse)
async def publish_post(post_id: str, data: PostFields, service: Drafts) -> PostResponse:
    """Write the fields onto the post, publish it and drop its draft."""
    post = await service.publish(post_id, data)
    return PostResponse.from_post(post)
