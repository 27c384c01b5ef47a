"""
Photo result Pydantic schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field


class AxisScore(BaseModel):
    """One axis of a photo's aggregate in every display form."""

    score: float = Field(..., description="Weighted mean on the 0-3 scale")
    percentage: int = Field(..., ge=0, le=100)
    one_to_ten: int = Field(..., ge=1, le=10)


class PhotoScores(BaseModel):
    """Aggregate results of a photo, visible to its owner."""

    photo_id: str
    vote_count: int
    confidence: float = 0.0
    is_meaningful: bool = Field(False, description="Enough votes for the results to be final")
    attraction: Optional[AxisScore] = None
    trust: Optional[AxisScore] = None
    intelligence: Optional[AxisScore] = None
