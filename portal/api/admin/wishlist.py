"""
Admin Wishlist Endpoints - ticket triage, replies, notes and batch actions.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from portal.api.schemas import MessageResponse, WishlistNoteResponse, WishlistResponse
from portal.core.config import get_settings
from portal.core.dependencies import Wishes
from portal.models.wishlist import WishlistCategory, WishlistPriority, WishlistStatus

router = APIRouter(prefix="/wishlist", tags=["Admin Wishlist"])
settings = get_settings()


# ============== Request/Response Models ==============


class StatusUpdate(BaseModel):
    status: WishlistStatus


class PriorityUpdate(BaseModel):
    priority: WishlistPriority


class ReplyRequest(BaseModel):
    text: str


class NoteRequest(BaseModel):
    content: str


class BatchStatusRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)
    status: WishlistStatus


class BatchDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class BatchResult(BaseModel):
    requested: int
    affected: int


class WishlistStatsResponse(BaseModel):
    total: int
    by_status: dict[str, int]
    urgent_open: int


class WishlistListResponse(BaseModel):
    tickets: list[WishlistResponse]
    total: int
    page: int
    page_size: int
    stats: WishlistStatsResponse


class WishlistDetailResponse(BaseModel):
    ticket: WishlistResponse
    notes: list[WishlistNoteResponse]


class PendingCountResponse(BaseModel):
    pending: int


# ============== Listing ==============


@router.get("", response_model=WishlistListResponse)
async def list_tickets(
    service: Wishes,
    status: Optional[WishlistStatus] = None,
    priority: Optional[WishlistPriority] = None,
    category: Optional[WishlistCategory] = None,
    q: Optional[str] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.admin_page_size,
) -> WishlistListResponse:
    """
    Filtered page of tickets, newest first.

    The stats block always covers every ticket, not just the filtered
    ones, so the summary tiles stay put while the table is narrowed.
    """
    listing = await service.list(status, priority, category, q, page, page_size)
    return WishlistListResponse(
        tickets=[WishlistResponse.from_ticket(t) for t in listing.page.rows],
        total=listing.page.total_count,
        page=page,
        page_size=page_size,
        stats=WishlistStatsResponse(
            total=listing.stats.total,
            by_status=listing.stats.by_status,
            urgent_open=listing.stats.urgent_open,
        ),
    )


@router.get("/pending-count", response_model=PendingCountResponse)
async def pending_count(service: Wishes) -> PendingCountResponse:
    """Tickets waiting on an admin, for the dashboard badge."""
    return PendingCountResponse(pending=await service.pending_count())


# ============== Batch Actions ==============


@router.post("/batch/status", response_model=BatchResult)
async def batch_set_status(data: BatchStatusRequest, service: Wishes) -> BatchResult:
    affected = await service.batch_set_status(data.ids, data.status)
    return BatchResult(requested=len(data.ids), affected=affected)


@router.post("/batch/delete", response_model=BatchResult)
async def batch_delete(data: BatchDeleteRequest, service: Wishes) -> BatchResult:
    affected = await service.batch_delete(data.ids)
    return BatchResult(requested=len(data.ids), affected=affected)


@router.delete("/notes/{note_id}", response_model=MessageResponse)
async def delete_note(note_id: str, service: Wishes) -> MessageResponse:
    await service.delete_note(note_id)
    return MessageResponse(message="Note deleted")


# ============== Single Ticket ==============


@router.get("/{ticket_id}", response_model=WishlistDetailResponse)
async def get_ticket(ticket_id: str, service: Wishes) -> WishlistDetailResponse:
    """A ticket with its internal notes."""
    ticket = await service.get(ticket_id)
    notes = await service.list_notes(ticket_id)
    return WishlistDetailResponse(
        ticket=WishlistResponse.from_ticket(ticket),
        notes=[WishlistNoteResponse.from_note(n) for n in notes],
    )


@router.patch("/{ticket_id}/status", response_model=WishlistResponse)
async def set_status(ticket_id: str, data: StatusUpdate, service: Wishes) -> WishlistResponse:
    return WishlistResponse.from_ticket(await service.set_status(ticket_id, data.status))


@router.patch("/{ticket_id}/priority", response_model=WishlistResponse)
async def set_priority(ticket_id: str, data: PriorityUpdate, service: Wishes) -> WishlistResponse:
    return WishlistResponse.from_ticket(await service.set_priority(ticket_id, data.priority))


@router.post("/{ticket_id}/reply", response_model=WishlistResponse)
async def reply(ticket_id: str, data: ReplyRequest, service: Wishes) -> WishlistResponse:
    """Reply to the citizen; this also marks the ticket completed."""
    return WishlistResponse.from_ticket(await service.reply(ticket_id, data.text))


@router.get("/{ticket_id}/notes", response_model=list[WishlistNoteResponse])
async def list_notes(ticket_id: str, service: Wishes) -> list[WishlistNoteResponse]:
    notes = await service.list_notes(ticket_id)
    return [WishlistNoteResponse.from_note(n) for n in notes]


@router.post(
    "/{ticket_id}/notes",
    response_model=WishlistNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_note(ticket_id: str, data: NoteRequest, service: Wishes) -> WishlistNoteResponse:
    return WishlistNoteResponse.from_note(await service.add_note(ticket_id, data.content))


@router.delete("/{ticket_id}", response_model=MessageResponse)
async def delete_ticket(ticket_id: str, service: Wishes) -> MessageResponse:
    await service.delete(ticket_id)
    return MessageResponse(message=f"Ticket '{ticket_id}' deleted")
