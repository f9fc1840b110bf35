"""
Admin API Routes Package.

Aggregates all admin-related API endpoints:
- posts: Post management and the draft/publish workflow
- wishlist: Wishlist ticket triage, replies, notes and batch actions

Every route below is guarded once by the router-level admin dependency.
"""

from fastapi import APIRouter, Depends

from portal.api.admin import posts, wishlist
from portal.core.dependencies import require_admin

# Create main admin router
admin_router = APIRouter(dependencies=[Depends(require_admin)])

# Include all admin sub-routers (each already has its prefix)
admin_router.include_router(posts.router)
admin_router.include_router(wishlist.router)

__all__ = ["admin_router"]
