"""
Photo skip model.

A skip hides one photo from one rater for a short time. It never touches
the photo aggregate or the rater's karma.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class PhotoSkip(Base):
    """Time-limited exclusion of a photo for a rater."""

    __tablename__ = "photo_skips"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    rater_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    photo_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("photos.id", ondelete="CASCADE"),
    )

    # Skips past this instant are ignored by the selector and purged by a job
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    __table_args__ = (UniqueConstraint("rater_id", "photo_id", name="uq_photo_skips_rater_photo"),)
