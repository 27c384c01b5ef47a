"""
User model for PostgreSQL storage.

Holds the slice of the account that the voting engine reads and writes:
targeting demographics (gender, birth date) and the karma balance.
Credentials and profile management live in the account service.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Date, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Gender(str, Enum):
    """Self-declared gender used by photo targeting filters."""

    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    PREFER_NOT_TO_SAY = "PREFER_NOT_TO_SAY"


class User(Base):
    """
    Rater / photo owner account.

    Karma is earned by voting and is capped by MAX_KARMA; the voting engine
    only ever increments it through UserRepository.award_karma.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)

    # Demographics (optional, used only for targeting match)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Free regenerating currency
    karma: Mapped[int] = mapped_column(Integer, default=50)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
