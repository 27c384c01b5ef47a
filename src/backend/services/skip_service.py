"""
Photo skip service.

Skipping hides a photo from the rater for SKIP_TTL_SECONDS without any
reward or penalty. Skips are best effort: a failure to record one is logged
and reported as success so it never blocks the rater's flow.
"""

from datetime import timedelta

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.dates import utc_now
from repositories.skip_repository import SkipRepository

logger = structlog.get_logger(__name__)


class SkipService:
    """Service recording and expiring photo skips."""

    def __init__(self, db: AsyncSession, ttl_seconds: int | None = None):
        self.db = db
        self.skip_repo = SkipRepository(db)
        self.ttl = timedelta(seconds=ttl_seconds if ttl_seconds is not None else settings.SKIP_TTL_SECONDS)

    async def skip_photo(self, rater_id: str, photo_id: str) -> bool:
        """Record a skip. Always returns True."""
        expires_at = utc_now() + self.ttl
        try:
            await self.skip_repo.upsert(rater_id, photo_id, expires_at)
            await self.db.commit()
            logger.debug("photo_skipped", rater_id=rater_id, photo_id=photo_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning("photo_skip_failed", rater_id=rater_id, photo_id=photo_id, error=str(e))
        return True

    async def purge_expired(self) -> int:
        """Delete skips whose window has passed."""
        removed = await self.skip_repo.delete_expired(utc_now())
        await self.db.commit()
        if removed:
            logger.info("expired_skips_purged", count=removed)
        return removed
