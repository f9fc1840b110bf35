"""
Wishlist Service - lifecycle of citizen-submitted requests.
Citizens submit wishes; admins move them through pending, processing,
completed or rejected, set priorities, reply and keep internal notes.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc

from portal.core.config import get_settings
from portal.core.exceptions import ValidationError
from portal.models.base import utcnow
from portal.models.wishlist import (
    Wishlist,
    WishlistCategory,
    WishlistNote,
    WishlistPriority,
    WishlistStatus,
)
from portal.services.record_store import Page, RecordStore, text_match

logger = logging.getLogger(__name__)
settings = get_settings()

_email_adapter = TypeAdapter(EmailStr)


@dataclass
class WishlistStats:
    """Summary tiles for the admin view, always over every ticket."""

    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    urgent_open: int = 0


@dataclass
class WishlistListing:
    page: Page[Wishlist]
    stats: WishlistStats


def _coerce(enum_cls: type[Enum], value, field_name: str) -> Enum:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value}", field=field_name)


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class WishlistService:
    """Service for managing wishlist tickets."""

    def __init__(self, store: RecordStore):
        self.store = store

    # ==================== Submission ====================

    async def submit(
        self,
        title: str,
        content: str,
        category: WishlistCategory | str = WishlistCategory.OTHER,
        priority: Optional[WishlistPriority | str] = None,
        contact_name: Optional[str] = None,
        contact_phone: Optional[str] = None,
        contact_email: Optional[str] = None,
    ) -> Wishlist:
        """Create a new ticket. Status always starts as pending."""
        title = (title or "").strip()
        content = (content or "").strip()

        if not title:
            raise ValidationError("Title is required", field="title")
        if not content:
            raise ValidationError("Content is required", field="content")
        if len(content) < settings.wishlist_min_content_length:
            raise ValidationError(
                f"Content must be at least {settings.wishlist_min_content_length} characters",
                field="content",
            )

        category = _coerce(WishlistCategory, category, "category")
        priority = _coerce(WishlistPriority, priority or WishlistPriority.MEDIUM, "priority")

        contact_email = _optional(contact_email)
        if contact_email:
            try:
                _email_adapter.validate_python(contact_email)
            except PydanticValidationError:
                raise ValidationError("Invalid email address", field="contact_email")

        ticket = await self.store.insert(
            Wishlist,
            {
                "title": title,
                "content": content,
                "category": category.value,
                "status": WishlistStatus.PENDING.value,
                "priority": priority.value,
                "contact_name": _optional(contact_name),
                "contact_phone": _optional(contact_phone),
                "contact_email": contact_email,
                "admin_reply": None,
                "replied_at": None,
            },
        )
        logger.info(f"New wishlist ticket {ticket.id} in category {category.value}")
        return ticket

    # ==================== Reads ====================

    async def get(self, ticket_id: str) -> Wishlist:
        return await self.store.get(Wishlist, ticket_id)

    async def list(
        self,
        status: Optional[WishlistStatus | str] = None,
        priority: Optional[WishlistPriority | str] = None,
        category: Optional[WishlistCategory | str] = None,
        q: Optional[str] = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> WishlistListing:
        """Filtered page of tickets, newest first, with unfiltered stats."""
        criteria = []
        if status:
            criteria.append(Wishlist.status == _coerce(WishlistStatus, status, "status").value)
        if priority:
            criteria.append(
                Wishlist.priority == _coerce(WishlistPriority, priority, "priority").value
            )
        if category:
            criteria.append(
                Wishlist.category == _coerce(WishlistCategory, category, "category").value
            )
        if q and q.strip():
            criteria.append(
                text_match(
                    q.strip(), Wishlist.title, Wishlist.content, Wishlist.contact_name
                )
            )

        result = await self.store.list(
            Wishlist,
            *criteria,
            order_by=[desc(Wishlist.created_at)],
            page=page,
            page_size=page_size or settings.admin_page_size,
        )
        return WishlistListing(page=result, stats=await self.stats())

    async def stats(self) -> WishlistStats:
        """Counts by status plus unfinished urgent tickets, over the whole table."""
        counts = await self.store.count_by(Wishlist, Wishlist.status)
        by_status = {s.value: counts.get(s.value, 0) for s in WishlistStatus}
        urgent_open = await self.store.count(
            Wishlist,
            Wishlist.priority == WishlistPriority.URGENT.value,
            Wishlist.status != WishlistStatus.COMPLETED.value,
        )
        return WishlistStats(
            total=sum(counts.values()),
            by_status=by_status,
            urgent_open=urgent_open,
        )

    async def recent(self, limit: int | None = None) -> List[Wishlist]:
        """Newest tickets for the public wall."""
        result = await self.store.list(
            Wishlist,
            order_by=[desc(Wishlist.created_at)],
            page_size=limit or settings.wishlist_public_limit,
        )
        return result.rows

    async def quick_search(self, q: str) -> List[Wishlist]:
        """A few tickets whose title or content contains `q`, for the search box."""
        term = (q or "").strip()
        if len(term) < settings.quick_search_min_length:
            return []

        result = await self.store.list(
            Wishlist,
            text_match(term, Wishlist.title, Wishlist.content),
            order_by=[desc(Wishlist.created_at)],
            page_size=settings.quick_search_wishlist_limit,
        )
        return result.rows

    async def pending_count(self) -> int:
        """Tickets still waiting on an admin (pending or processing)."""
        return await self.store.count(
            Wishlist,
            Wishlist.status.in_(
                [WishlistStatus.PENDING.value, WishlistStatus.PROCESSING.value]
            ),
        )

    # ==================== Admin Transitions ====================

    async def set_status(self, ticket_id: str, status: WishlistStatus | str) -> Wishlist:
        status = _coerce(WishlistStatus, status, "status")
        await self.store.update(
            Wishlist, ticket_id, {"status": status.value, "updated_at": utcnow()}
        )
        return await self.get(ticket_id)

    async def set_priority(self, ticket_id: str, priority: WishlistPriority | str) -> Wishlist:
        priority = _coerce(WishlistPriority, priority, "priority")
        await self.store.update(
            Wishlist, ticket_id, {"priority": priority.value, "updated_at": utcnow()}
        )
        return await self.get(ticket_id)

    async def reply(self, ticket_id: str, text: str) -> Wishlist:
        """Store the admin reply and complete the ticket in one update."""
        text = (text or "").strip()
        if not text:
            raise ValidationError("Reply text is required", field="admin_reply")

        now = utcnow()
        await self.store.update(
            Wishlist,
            ticket_id,
            {
                "admin_reply": text,
                "status": WishlistStatus.COMPLETED.value,
                "replied_at": now,
                "updated_at": now,
            },
        )
        logger.info(f"Replied to wishlist ticket {ticket_id}")
        return await self.get(ticket_id)

    async def delete(self, ticket_id: str) -> None:
        await self.store.delete(Wishlist, ticket_id)
        logger.info(f"Deleted wishlist ticket {ticket_id}")

    # ==================== Batch Operations ====================

    async def batch_set_status(self, ticket_ids: Iterable[str], status: WishlistStatus | str) -> int:
        """Set the status of many tickets in one statement. Returns rows changed."""
        ids = list(ticket_ids)
        if not ids:
            raise ValidationError("No tickets selected", field="ids")
        status = _coerce(WishlistStatus, status, "status")

        changed = await self.store.update_where(
            Wishlist,
            {"status": status.value, "updated_at": utcnow()},
            Wishlist.id.in_(ids),
        )
        logger.info(f"Batch status {status.value}: {changed} of {len(ids)} tickets updated")
        return changed

    async def batch_delete(self, ticket_ids: Iterable[str]) -> int:
        """Delete many tickets in one statement. Returns rows removed."""
        ids = list(ticket_ids)
        if not ids:
            raise ValidationError("No tickets selected", field="ids")

        removed = await self.store.delete_where(Wishlist, Wishlist.id.in_(ids))
        logger.info(f"Batch delete: {removed} of {len(ids)} tickets removed")
        return removed

    # ==================== Internal Notes ====================

    async def add_note(self, ticket_id: str, text: str) -> WishlistNote:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Note text is required", field="content")

        await self.get(ticket_id)
        return await self.store.insert(
            WishlistNote, {"wishlist_id": ticket_id, "content": text}
        )

    async def list_notes(self, ticket_id: str) -> List[WishlistNote]:
        """Notes on a ticket, newest first."""
        result = await self.store.list(
            WishlistNote,
            WishlistNote.wishlist_id == ticket_id,
            order_by=[desc(WishlistNote.created_at)],
        )
        return result.rows

    async def delete_note(self, note_id: str) -> None:
        await self.store.delete(WishlistNote, note_id)
