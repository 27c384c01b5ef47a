"""
Vote Submission Service.

Persists one vote and everything that follows from it as a single
transaction:
1. Lock and validate the photo (exists, approved, not expired, not own).
2. Reject a duplicate (photo, rater) pair.
3. Derive the rater's history statistics and normalize the ratings.
4. Insert the vote.
5. Recompute the photo aggregate from its full vote set.
6. Award karma (penalized for low-rigor patterns), capped at MAX_KARMA.
7. Commit.

The photo row is locked first and the rater row second, so concurrent
votes on one photo (or by one rater) serialize instead of interleaving their
read-aggregate-write steps. The (photo_id, voter_id) unique constraint backs
up the duplicate check under races.

The caller owns the rater's VotingSession; it is only updated once the
transaction has committed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.dates import ensure_utc, utc_now
from models.photo import PhotoStatus
from repositories.photo_repository import PhotoRepository
from repositories.user_repository import UserRepository
from repositories.vote_repository import VoteRepository
from services.aggregation import PhotoAggregate, aggregate_votes
from services.normalization import (
    NormalizedVote,
    Ratings,
    compute_voter_statistics,
    normalize_vote,
)
from services.pattern_detection import PatternAssessment, VotingSession

logger = structlog.get_logger(__name__)


class VoteRejection(str, Enum):
    """Reason codes for votes refused by business rules."""

    PHOTO_NOT_FOUND = "photo_not_found"
    RATER_NOT_FOUND = "rater_not_found"
    SELF_VOTE = "self_vote"
    PHOTO_NOT_ACTIVE = "photo_not_active"
    PHOTO_EXPIRED = "photo_expired"
    ALREADY_VOTED = "already_voted"


class VoteSubmissionError(Exception):
    """A vote was refused; nothing was written."""

    def __init__(self, reason: VoteRejection, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class VoteFeedback:
    """Optional qualitative feedback attached to a vote."""

    feeling_tags: list[str] = field(default_factory=list)
    suggestion_tags: list[str] = field(default_factory=list)
    note: Optional[str] = None


@dataclass(frozen=True)
class VoteMetadata:
    """Optional client-reported submission metadata."""

    voting_duration_ms: Optional[int] = None
    device_type: Optional[str] = None


@dataclass(frozen=True)
class VoteSubmissionResult:
    """Outcome of an accepted vote."""

    vote_id: str
    karma_earned: int
    normalized: NormalizedVote
    aggregate: PhotoAggregate
    show_warning: bool = False
    penalized: bool = False


class VoteSubmissionService:
    """Transactional vote orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        base_karma: Optional[int] = None,
        max_karma: Optional[int] = None,
    ):
        self.db = db
        self.photo_repo = PhotoRepository(db)
        self.user_repo = UserRepository(db)
        self.vote_repo = VoteRepository(db)
        self.base_karma = settings.KARMA_PER_VOTE if base_karma is None else base_karma
        self.max_karma = settings.MAX_KARMA if max_karma is None else max_karma

    async def submit_vote(
        self,
        rater_id: str,
        photo_id: str,
        ratings: Ratings,
        session: Optional[VotingSession] = None,
        feedback: Optional[VoteFeedback] = None,
        metadata: Optional[VoteMetadata] = None,
    ) -> VoteSubmissionResult:
        """
        Submit a vote.

        Raises:
            VoteSubmissionError: If a business rule refuses the vote. The
                transaction is rolled back and the session is left untouched.
        """
        if session is None:
            return await self._submit(rater_id, photo_id, ratings, None, feedback, metadata)
        # One submission at a time per session so each sees the previous vote in the window
        async with session.lock:
            return await self._submit(rater_id, photo_id, ratings, session, feedback, metadata)

    async def _submit(
        self,
        rater_id: str,
        photo_id: str,
        ratings: Ratings,
        session: Optional[VotingSession],
        feedback: Optional[VoteFeedback],
        metadata: Optional[VoteMetadata],
    ) -> VoteSubmissionResult:
        assessment = session.assess(ratings.as_tuple()) if session else None

        try:
            result = await self._apply(rater_id, photo_id, ratings, assessment, feedback, metadata)
            await self.db.commit()
        except VoteSubmissionError as e:
            await self.db.rollback()
            logger.info("vote_rejected", rater_id=rater_id, photo_id=photo_id, reason=e.reason.value)
            raise
        except IntegrityError:
            # Lost a race against a concurrent submission of the same pair
            await self.db.rollback()
            logger.info("vote_rejected", rater_id=rater_id, photo_id=photo_id, reason="unique_violation")
            raise VoteSubmissionError(VoteRejection.ALREADY_VOTED, "You have already voted on this photo")
        except Exception:
            await self.db.rollback()
            raise

        if session is not None and assessment is not None:
            session.record(ratings.as_tuple(), assessment)

        logger.info(
            "vote_submitted",
            rater_id=rater_id,
            photo_id=photo_id,
            vote_id=result.vote_id,
            karma_earned=result.karma_earned,
            weight=result.normalized.weight,
            vote_count=result.aggregate.vote_count,
        )
        return result

    async def _apply(
        self,
        rater_id: str,
        photo_id: str,
        ratings: Ratings,
        assessment: Optional[PatternAssessment],
        feedback: Optional[VoteFeedback],
        metadata: Optional[VoteMetadata],
    ) -> VoteSubmissionResult:
        photo = await self.photo_repo.get_for_update(photo_id)
        if photo is None:
            raise VoteSubmissionError(VoteRejection.PHOTO_NOT_FOUND, "Photo not found")
        if photo.user_id == rater_id:
            raise VoteSubmissionError(VoteRejection.SELF_VOTE, "You cannot vote on your own photo")
        if photo.status != PhotoStatus.APPROVED.value:
            raise VoteSubmissionError(VoteRejection.PHOTO_NOT_ACTIVE, "This photo is not available for voting")
        expires_at = ensure_utc(photo.expires_at)
        if expires_at is not None and expires_at <= utc_now():
            raise VoteSubmissionError(VoteRejection.PHOTO_EXPIRED, "This photo has expired")

        rater = await self.user_repo.get_for_update(rater_id)
        if rater is None:
            raise VoteSubmissionError(VoteRejection.RATER_NOT_FOUND, "Rater not found")

        if await self.vote_repo.exists_for(photo_id, rater_id):
            raise VoteSubmissionError(VoteRejection.ALREADY_VOTED, "You have already voted on this photo")

        history = await self.vote_repo.get_rating_history(rater_id)
        stats = compute_voter_statistics(history)
        normalized = normalize_vote(ratings, stats)

        feedback = feedback or VoteFeedback()
        metadata = metadata or VoteMetadata()
        vote = await self.vote_repo.create(
            photo_id=photo_id,
            voter_id=rater_id,
            ratings=ratings,
            normalized=normalized,
            feeling_tags=feedback.feeling_tags,
            suggestion_tags=feedback.suggestion_tags,
            note=feedback.note,
            voting_duration_ms=metadata.voting_duration_ms,
            device_type=metadata.device_type,
        )

        aggregate = aggregate_votes(await self.vote_repo.get_normalized_votes(photo_id))
        await self.photo_repo.update_aggregate(photo_id, aggregate)

        reward = assessment.karma_for(self.base_karma) if assessment else self.base_karma
        karma_earned = await self.user_repo.award_karma(rater_id, reward, self.max_karma)

        return VoteSubmissionResult(
            vote_id=vote.id,
            karma_earned=karma_earned,
            normalized=normalized,
            aggregate=aggregate,
            show_warning=assessment.show_warning if assessment else False,
            penalized=assessment.penalized if assessment else False,
        )
