"""
Photo skip repository for database operations.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import and_, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.photo_skip import PhotoSkip


class SkipRepository:
    """Repository for photo skip database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(self, rater_id: str, photo_id: str, expires_at: datetime) -> None:
        """Record a skip, or push back the expiry of an existing one."""
        result = await self.db.execute(
            update(PhotoSkip)
            .where(
                and_(
                    PhotoSkip.rater_id == rater_id,
                    PhotoSkip.photo_id == photo_id,
                )
            )
            .values(expires_at=expires_at)
        )
        if (getattr(result, "rowcount", 0) or 0) > 0:
            return

        self.db.add(
            PhotoSkip(
                id=str(uuid4()),
                rater_id=rater_id,
                photo_id=photo_id,
                expires_at=expires_at,
            )
        )
        await self.db.flush()

    async def delete_expired(self, now: datetime) -> int:
        """Remove skips whose exclusion window has passed."""
        result = await self.db.execute(delete(PhotoSkip).where(PhotoSkip.expires_at <= now))
        return getattr(result, "rowcount", 0) or 0
