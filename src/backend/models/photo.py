"""
Photo model for PostgreSQL storage.

Contains the submitted photo, its targeting filters and the aggregate
scores recomputed on every accepted vote.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class PhotoStatus(str, Enum):
    """Photo moderation lifecycle."""

    PENDING_MODERATION = "PENDING_MODERATION"
    APPROVED = "APPROVED"  # Only approved photos are served to raters
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class PhotoCategory(str, Enum):
    """Context the owner wants feedback for."""

    PROFESSIONAL = "PROFESSIONAL"
    DATING = "DATING"
    SOCIAL = "SOCIAL"


class PhotoTestType(str, Enum):
    """FREE tests have no targeting; PAID tests may filter by gender/age."""

    FREE = "FREE"
    PAID = "PAID"


class Photo(Base):
    """
    Photo submitted for anonymous rating.

    Aggregate columns (avg_*) stay NULL until the first vote lands; after
    that they are owned by VoteSubmissionService and written under a row lock.
    """

    __tablename__ = "photos"

    __table_args__ = (
        # Selector ordering: fewest votes first, then oldest
        Index("ix_photos_status_vote_count_created", "status", "vote_count", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    image_url: Mapped[str] = mapped_column(String(500))
    category: Mapped[str] = mapped_column(String(20), default=PhotoCategory.SOCIAL.value)
    test_type: Mapped[str] = mapped_column(String(10), default=PhotoTestType.FREE.value)
    status: Mapped[str] = mapped_column(
        String(30),
        default=PhotoStatus.PENDING_MODERATION.value,
        index=True,
    )

    # Targeting filters (PAID tests only)
    target_gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    target_age_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    target_age_max: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Aggregate
    vote_count: Mapped[int] = mapped_column(Integer, default=0)
    avg_attraction: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    avg_trust: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    avg_intelligence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    avg_confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
