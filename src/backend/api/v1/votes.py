"""
Voting endpoints.

Raters fetch the next eligible photo, vote on it (or skip it), and
acknowledge the low-effort warning when one is shown. Pattern detection
memory lives in the rater's voting session and ends with it.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import CurrentRater, get_current_rater, get_voting_session
from db.session import get_db
from schemas.vote import (
    NextPhotoResponse,
    PhotoOut,
    SessionEndResponse,
    SkipRequest,
    SkipResponse,
    VoteCreate,
    VoteResponse,
    WarningAckResponse,
)
from services.normalization import Ratings
from services.pattern_detection import SessionRegistry, VotingSession, get_session_registry
from services.photo_selector import PhotoSelector
from services.skip_service import SkipService
from services.vote_service import (
    VoteFeedback,
    VoteMetadata,
    VoteRejection,
    VoteSubmissionError,
    VoteSubmissionService,
)

logger = structlog.get_logger(__name__)

router = APIRouter()

_REJECTION_STATUS = {
    VoteRejection.PHOTO_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    VoteRejection.RATER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    VoteRejection.ALREADY_VOTED: status.HTTP_409_CONFLICT,
    VoteRejection.SELF_VOTE: status.HTTP_400_BAD_REQUEST,
    VoteRejection.PHOTO_NOT_ACTIVE: status.HTTP_400_BAD_REQUEST,
    VoteRejection.PHOTO_EXPIRED: status.HTTP_400_BAD_REQUEST,
}


@router.get("/next", response_model=NextPhotoResponse)
async def get_next_photo(
    current_rater: Annotated[CurrentRater, Depends(get_current_rater)],
    session: Annotated[VotingSession, Depends(get_voting_session)],
    db: AsyncSession = Depends(get_db),
) -> NextPhotoResponse:
    """
    Get the next photo to rate.

    Returns `no_more_photos = true` (not an error) once nothing is eligible.
    `pending_warning` stays true until the low-effort warning is acknowledged.
    """
    result = await PhotoSelector(db).get_next_photo(current_rater.id)
    photo = None
    if result.photo is not None:
        photo = PhotoOut(
            id=result.photo.id,
            image_url=result.photo.image_url,
            category=result.photo.category,
        )

    return NextPhotoResponse(
        photo=photo,
        no_more_photos=photo is None,
        pending_warning=session.warning_pending,
        penalized=session.penalized,
    )


@router.post("", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
async def submit_vote(
    vote_data: VoteCreate,
    current_rater: Annotated[CurrentRater, Depends(get_current_rater)],
    session: Annotated[VotingSession, Depends(get_voting_session)],
    db: AsyncSession = Depends(get_db),
) -> VoteResponse:
    """
    Submit a vote on a photo.

    Requirements:
    - Photo must exist, be approved and unexpired
    - Raters cannot vote on their own photos
    - Raters cannot vote twice on the same photo
    """
    ratings = Ratings(
        attraction=vote_data.attraction,
        trust=vote_data.trust,
        intelligence=vote_data.intelligence,
    )
    feedback = None
    if vote_data.feedback:
        feedback = VoteFeedback(
            feeling_tags=vote_data.feedback.feeling_tags,
            suggestion_tags=vote_data.feedback.suggestion_tags,
            note=vote_data.feedback.note,
        )
    metadata = None
    if vote_data.metadata:
        metadata = VoteMetadata(
            voting_duration_ms=vote_data.metadata.voting_duration_ms,
            device_type=vote_data.metadata.device_type,
        )

    service = VoteSubmissionService(db)
    try:
        result = await service.submit_vote(
            rater_id=current_rater.id,
            photo_id=vote_data.photo_id,
            ratings=ratings,
            session=session,
            feedback=feedback,
            metadata=metadata,
        )
    except VoteSubmissionError as e:
        raise HTTPException(
            status_code=_REJECTION_STATUS[e.reason],
            detail={"message": e.message, "reason": e.reason.value},
        )

    return VoteResponse(
        vote_id=result.vote_id,
        karma_earned=result.karma_earned,
        show_warning=result.show_warning,
        penalized=result.penalized,
    )


@router.post("/skip", response_model=SkipResponse)
async def skip_photo(
    skip_data: SkipRequest,
    current_rater: Annotated[CurrentRater, Depends(get_current_rater)],
    db: AsyncSession = Depends(get_db),
) -> SkipResponse:
    """Hide a photo from the rater for a while. Never fails the rater's flow."""
    await SkipService(db).skip_photo(current_rater.id, skip_data.photo_id)
    return SkipResponse(success=True)


@router.post("/warning/ack", response_model=WarningAckResponse)
async def acknowledge_warning(
    session: Annotated[VotingSession, Depends(get_voting_session)],
) -> WarningAckResponse:
    """
    Acknowledge the low-effort voting warning.

    From now on, continuing the pattern in this session earns no karma.
    """
    session.acknowledge_warning()
    logger.info("low_rigor_warning_acknowledged", session_id=session.session_id)
    return WarningAckResponse(acknowledged=True)


@router.delete("/session", response_model=SessionEndResponse)
async def end_session(
    current_rater: Annotated[CurrentRater, Depends(get_current_rater)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SessionEndResponse:
    """End the voting session, discarding its pattern memory."""
    ended = registry.end(current_rater.session_id)
    return SessionEndResponse(ended=ended)
