"""
Vote model for PostgreSQL storage.

Votes are append-only: once created they are never updated. The raw
ratings feed the rater's own history statistics; the normalized ratings
and weight feed the photo aggregate.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Vote(Base):
    """
    One rater's ratings of one photo on the three axes (0-3 scale).

    The (photo_id, voter_id) unique constraint is the authority on duplicate
    votes; the existence check in the service is only a fast path.
    """

    __tablename__ = "votes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    photo_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("photos.id", ondelete="CASCADE"),
        index=True,
    )
    voter_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    # Raw ratings as submitted
    attraction: Mapped[int] = mapped_column(SmallInteger)
    trust: Mapped[int] = mapped_column(SmallInteger)
    intelligence: Mapped[int] = mapped_column(SmallInteger)

    # Bias/rigor corrected ratings, clamped to [0, 3]
    normalized_attraction: Mapped[float] = mapped_column(Float)
    normalized_trust: Mapped[float] = mapped_column(Float)
    normalized_intelligence: Mapped[float] = mapped_column(Float)
    voter_weight: Mapped[float] = mapped_column(Float)
    voter_bias: Mapped[float] = mapped_column(Float, default=0.0)

    # Optional feedback
    feedback_feeling_tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    feedback_suggestion_tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    feedback_note: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Optional client metadata
    voting_duration_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    device_type: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("photo_id", "voter_id", name="uq_votes_photo_voter"),
        Index("ix_votes_voter_created", "voter_id", "created_at"),
    )
