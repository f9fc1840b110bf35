"""
Public Wishlist API Routes - submit a wish and browse the public wall.
"""

from typing import Optional

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from portal.api.schemas import WishlistPublicResponse
from portal.core.config import get_settings
from portal.core.dependencies import Wishes
from portal.middleware.security import limiter
from portal.models.wishlist import WishlistCategory

router = APIRouter(prefix="/wishlist")
settings = get_settings()


class WishlistSubmitRequest(BaseModel):
    title: str = Field(..., max_length=255)
    content: str
    category: WishlistCategory = WishlistCategory.OTHER
    contact_name: Optional[str] = Field(None, max_length=100)
    contact_phone: Optional[str] = Field(None, max_length=50)
    contact_email: Optional[str] = Field(None, max_length=255)

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "路灯不亮",
                "content": "小区东门路灯连续三天不亮，请尽快检修",
                "category": "municipal",
            }
        }
    }


@router.post("", response_model=WishlistPublicResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.wishlist_submit_rate)
async def submit_wish(request: Request, data: WishlistSubmitRequest, service: Wishes):
    """Submit a new wish. It starts as pending with medium priority."""
    ticket = await service.submit(
        title=data.title,
        content=data.content,
        category=data.category,
        contact_name=data.contact_name,
        contact_phone=data.contact_phone,
        contact_email=data.contact_email,
    )
    return WishlistPublicResponse.from_ticket(ticket)


@router.get("", response_model=list[WishlistPublicResponse])
async def recent_wishes(service: Wishes):
    """Most recent wishes for the public wall."""
    tickets = await service.recent()
    return [WishlistPublicResponse.from_ticket(t) for t in tickets]


@router.get("/{ticket_id}", response_model=WishlistPublicResponse)
async def get_wish(ticket_id: str, service: Wishes):
    """A single wish and its public reply."""
    ticket = await service.get(ticket_id)
    return WishlistPublicResponse.from_ticket(ticket)
