"""
Hive Portal Models Package

All SQLAlchemy models for the Hive Portal.
"""

from portal.models.base import Base
from portal.models.post import Category, ContentType, Post, PostDraft, PostStatus
from portal.models.user import User, UserRole
from portal.models.wishlist import (
    Wishlist,
    WishlistCategory,
    WishlistNote,
    WishlistPriority,
    WishlistStatus,
)

__all__ = [
    # Base
    "Base",
    # Users
    "User",
    "UserRole",
    # Content
    "Category",
    "ContentType",
    "Post",
    "PostDraft",
    "PostStatus",
    # Wishlist
    "Wishlist",
    "WishlistCategory",
    "WishlistNote",
    "WishlistPriority",
    "WishlistStatus",
]
