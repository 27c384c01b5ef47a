"""
Photo repository for database operations.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, exists, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.photo import Photo, PhotoStatus, PhotoTestType
from models.photo_skip import PhotoSkip
from models.vote import Vote
from services.aggregation import PhotoAggregate


class PhotoRepository:
    """Repository for photo database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, photo_id: str) -> Optional[Photo]:
        """Get a photo by ID."""
        result = await self.db.execute(select(Photo).where(Photo.id == photo_id))
        return result.scalar_one_or_none()

    async def get_for_update(self, photo_id: str) -> Optional[Photo]:
        """
        Get a photo and lock its row until the transaction ends.

        Serializes concurrent aggregate recomputation for the same photo.
        """
        result = await self.db.execute(
            select(Photo).where(Photo.id == photo_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def update_aggregate(self, photo_id: str, aggregate: PhotoAggregate) -> bool:
        """Write a freshly recomputed aggregate back to the photo."""
        result = await self.db.execute(
            update(Photo)
            .where(Photo.id == photo_id)
            .values(
                vote_count=aggregate.vote_count,
                avg_attraction=aggregate.avg_attraction,
                avg_trust=aggregate.avg_trust,
                avg_intelligence=aggregate.avg_intelligence,
                avg_confidence=aggregate.avg_confidence,
            )
        )
        return (getattr(result, "rowcount", 0) or 0) > 0

    async def find_next_eligible(
        self,
        rater_id: str,
        rater_gender: Optional[str],
        rater_age: Optional[int],
        now: datetime,
        limit: int = 1,
    ) -> list[Photo]:
        """
        Photos the rater may vote on, fairest first.

        Eligible photos are approved, unexpired, not owned by the rater, not
        already voted on or currently skipped by the rater, and match the
        photo's gender and age targeting. Ordered by fewest votes, then oldest.
        """
        already_voted = exists().where(
            and_(
                Vote.photo_id == Photo.id,
                Vote.voter_id == rater_id,
            )
        )
        currently_skipped = exists().where(
            and_(
                PhotoSkip.photo_id == Photo.id,
                PhotoSkip.rater_id == rater_id,
                PhotoSkip.expires_at > now,
            )
        )

        # Gender targeting
        gender_match = [
            Photo.test_type == PhotoTestType.FREE.value,
            Photo.target_gender.is_(None),
        ]
        if rater_gender:
            gender_match.append(Photo.target_gender == rater_gender)

        # Age targeting; an unknown age only matches open bounds
        if rater_age is None:
            age_match = and_(
                Photo.target_age_min.is_(None),
                Photo.target_age_max.is_(None),
            )
        else:
            age_match = and_(
                or_(Photo.target_age_min.is_(None), Photo.target_age_min <= rater_age),
                or_(Photo.target_age_max.is_(None), Photo.target_age_max >= rater_age),
            )

        result = await self.db.execute(
            select(Photo)
            .where(
                and_(
                    Photo.user_id != rater_id,
                    Photo.status == PhotoStatus.APPROVED.value,
                    or_(Photo.expires_at.is_(None), Photo.expires_at > now),
                    ~already_voted,
                    ~currently_skipped,
                    or_(*gender_match),
                    age_match,
                )
            )
            .order_by(Photo.vote_count.asc(), Photo.created_at.asc())
            .limit(limit)
        )
        return list(result.scalars().all())
