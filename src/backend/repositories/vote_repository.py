"""
Vote repository for database operations.
"""

from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.vote import Vote
from services.normalization import NormalizedVote, Ratings


class VoteRepository:
    """Repository for vote database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists_for(self, photo_id: str, voter_id: str) -> bool:
        """Check whether the rater already voted on the photo."""
        result = await self.db.execute(
            select(func.count(Vote.id)).where(
                and_(
                    Vote.photo_id == photo_id,
                    Vote.voter_id == voter_id,
                )
            )
        )
        count = result.scalar() or 0
        return count > 0

    async def create(
        self,
        photo_id: str,
        voter_id: str,
        ratings: Ratings,
        normalized: NormalizedVote,
        feeling_tags: Optional[list[str]] = None,
        suggestion_tags: Optional[list[str]] = None,
        note: Optional[str] = None,
        voting_duration_ms: Optional[int] = None,
        device_type: Optional[str] = None,
    ) -> Vote:
        """
        Insert a vote record.

        Flushes immediately so a (photo_id, voter_id) uniqueness violation
        raises IntegrityError here, inside the caller's transaction.
        """
        vote = Vote(
            id=str(uuid4()),
            photo_id=photo_id,
            voter_id=voter_id,
            attraction=ratings.attraction,
            trust=ratings.trust,
            intelligence=ratings.intelligence,
            normalized_attraction=normalized.attraction,
            normalized_trust=normalized.trust,
            normalized_intelligence=normalized.intelligence,
            voter_weight=normalized.weight,
            voter_bias=normalized.bias,
            feedback_feeling_tags=list(feeling_tags or []),
            feedback_suggestion_tags=list(suggestion_tags or []),
            feedback_note=note,
            voting_duration_ms=voting_duration_ms,
            device_type=device_type,
        )

        self.db.add(vote)
        await self.db.flush()

        return vote

    async def get_rating_history(self, voter_id: str) -> list[tuple[int, int, int]]:
        """All raw ratings a rater has given, as (attraction, trust, intelligence)."""
        result = await self.db.execute(
            select(Vote.attraction, Vote.trust, Vote.intelligence).where(Vote.voter_id == voter_id)
        )
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def get_normalized_votes(self, photo_id: str) -> list[NormalizedVote]:
        """All normalized votes of a photo with their weights, for re-aggregation."""
        result = await self.db.execute(
            select(
                Vote.normalized_attraction,
                Vote.normalized_trust,
                Vote.normalized_intelligence,
                Vote.voter_weight,
            ).where(Vote.photo_id == photo_id)
        )
        return [
            NormalizedVote(
                attraction=row[0],
                trust=row[1],
                intelligence=row[2],
                weight=row[3],
            )
            for row in result.all()
        ]
