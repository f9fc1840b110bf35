from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from portal.models.base import Base


class WishlistStatus(str, Enum):
    """Wishlist ticket status enum."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    REJECTED = "rejected"


class WishlistPriority(str, Enum):
    """Wishlist ticket priority enum."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class WishlistCategory(str, Enum):
    """Wishlist ticket category enum."""
    RENOVATION = "renovation"
    MUNICIPAL = "municipal"
    COOPERATION = "cooperation"
    OTHER = "other"


# Display labels shared by every admin and public view
STATUS_LABELS = {
    WishlistStatus.PENDING: "待处理",
    WishlistStatus.PROCESSING: "处理中",
    WishlistStatus.COMPLETED: "已完成",
    WishlistStatus.REJECTED: "已拒绝",
}

PRIORITY_LABELS = {
    WishlistPriority.LOW: "低",
    WishlistPriority.MEDIUM: "中",
    WishlistPriority.HIGH: "高",
    WishlistPriority.URGENT: "紧急",
}

CATEGORY_LABELS = {
    WishlistCategory.RENOVATION: "小区旧改",
    WishlistCategory.MUNICIPAL: "市政工程",
    WishlistCategory.COOPERATION: "本地合作",
    WishlistCategory.OTHER: "其他",
}


class Wishlist(Base):
    """Citizen-submitted request ("wishlist" item)."""

    __tablename__ = "wishlist"

    __table_args__ = (
        Index("ix_wishlist_status", "status"),
        Index("ix_wishlist_created_at", "created_at"),
    )

    # Ticket details
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(20), default=WishlistCategory.OTHER.value, nullable=False)
    status = Column(String(20), default=WishlistStatus.PENDING.value, nullable=False)
    priority = Column(String(20), default=WishlistPriority.MEDIUM.value, nullable=False)

    # Optional contact details (never shown publicly)
    contact_name = Column(String(100), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)

    # Admin reply
    admin_reply = Column(Text, nullable=True)
    replied_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    notes = relationship(
        "WishlistNote",
        back_populates="wishlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "category_label": CATEGORY_LABELS.get(self.category, self.category),
            "status": self.status,
            "status_label": STATUS_LABELS.get(self.status, self.status),
            "priority": self.priority,
            "priority_label": PRIORITY_LABELS.get(self.priority, self.priority),
            "contact_name": self.contact_name,
            "contact_phone": self.contact_phone,
            "contact_email": self.contact_email,
            "admin_reply": self.admin_reply,
            "replied_at": self.replied_at.isoformat() if self.replied_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_public_dict(self) -> dict:
        """Public view: no contact details."""
        data = self.to_dict()
        for key in ("contact_name", "contact_phone", "contact_email"):
            data.pop(key)
        return data

    def __repr__(self) -> str:
        return f"<Wishlist(id={self.id}, title={self.title}, status={self.status})>"


class WishlistNote(Base):
    """Internal admin-only annotation on a wishlist ticket."""

    __tablename__ = "wishlist_notes"

    __table_args__ = (
        Index("ix_wishlist_notes_wishlist_id", "wishlist_id"),
    )

    wishlist_id = Column(
        String(36),
        ForeignKey("wishlist.id", ondelete="CASCADE"),
        nullable=False,
    )
    content = Column(Text, nullable=False)

    wishlist = relationship("Wishlist", back_populates="notes")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "wishlist_id": self.wishlist_id,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<WishlistNote(id={self.id}, wishlist_id={self.wishlist_id})>"
