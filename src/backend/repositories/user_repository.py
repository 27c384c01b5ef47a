"""
User repository for database operations.

Serves as the rater profile source (gender, birth date) and the karma ledger.
"""

from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_for_update(self, user_id: str) -> Optional[User]:
        """Get a user and lock the row, serializing submissions by one rater."""
        result = await self.db.execute(select(User).where(User.id == user_id).with_for_update())
        return result.scalar_one_or_none()

    async def award_karma(self, user_id: str, amount: int, max_karma: int) -> int:
        """
        Increment karma without crossing the ceiling.

        Locks the user row, adds min(amount, max_karma - current) and never
        subtracts. Returns the amount actually awarded.
        """
        if amount <= 0:
            return 0

        result = await self.db.execute(
            select(User.karma).where(User.id == user_id).with_for_update()
        )
        current = result.scalar_one_or_none()
        if current is None:
            return 0

        to_add = max(0, min(amount, max_karma - current))
        if to_add == 0:
            return 0

        result = await self.db.execute(
            update(User).where(User.id == user_id).values(karma=User.karma + to_add)
        )
        return to_add if self._get_rowcount(result) > 0 else 0
