"""
Photo results endpoints.

Owners read the aggregate of their photos here. Results below
MEANINGFUL_VOTE_COUNT votes are flagged as preliminary.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import CurrentRater, get_current_rater
from db.session import get_db
from repositories.photo_repository import PhotoRepository
from schemas.photo import AxisScore, PhotoScores
from services.aggregation import is_meaningful, score_to_1_to_10, score_to_percentage

router = APIRouter()


def _axis_score(value: Optional[float]) -> Optional[AxisScore]:
    if value is None:
        return None
    return AxisScore(
        score=value,
        percentage=score_to_percentage(value),
        one_to_ten=score_to_1_to_10(value),
    )


@router.get("/{photo_id}/scores", response_model=PhotoScores)
async def get_photo_scores(
    photo_id: str,
    current_rater: Annotated[CurrentRater, Depends(get_current_rater)],
    db: AsyncSession = Depends(get_db),
) -> PhotoScores:
    """
    Get the aggregate scores of one of your photos.

    Photos owned by someone else are reported as not found.
    """
    photo = await PhotoRepository(db).get_by_id(photo_id)
    if photo is None or photo.user_id != current_rater.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Photo not found",
        )

    return PhotoScores(
        photo_id=photo.id,
        vote_count=photo.vote_count,
        confidence=photo.avg_confidence or 0.0,
        is_meaningful=is_meaningful(photo.vote_count),
        attraction=_axis_score(photo.avg_attraction),
        trust=_axis_score(photo.avg_trust),
        intelligence=_axis_score(photo.avg_intelligence),
    )
