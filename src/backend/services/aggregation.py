"""
Photo score aggregation.

Combines the normalized votes of one photo into weighted per-axis averages
and a confidence value that saturates with the number of votes.
"""

import math
from collections.abc import Sequence
from typing import Literal, Optional

from pydantic import BaseModel

from services.normalization import SCALE_MAX, NormalizedVote

Axis = Literal["attraction", "trust", "intelligence"]

# Confidence growth rate: ~0.63 at 20 votes, ~0.92 at 50, ~0.99 at 100
CONFIDENCE_K = 0.05

# Below this many votes results are shown as preliminary
MEANINGFUL_VOTE_COUNT = 20


class PhotoAggregate(BaseModel):
    """Aggregate written back to the photo record after each vote."""

    vote_count: int
    avg_attraction: Optional[float] = None
    avg_trust: Optional[float] = None
    avg_intelligence: Optional[float] = None
    avg_confidence: Optional[float] = None


def calculate_weighted_average(votes: Sequence[NormalizedVote], axis: Axis) -> float:
    """Weighted mean of one axis; 0 for no votes or zero total weight."""
    if any(vote.weight < 0 for vote in votes):
        raise ValueError("vote weights must be non-negative")
    if not votes:
        return 0.0

    weighted_sum = 0.0
    total_weight = 0.0
    for vote in votes:
        weighted_sum += getattr(vote, axis) * vote.weight
        total_weight += vote.weight

    return weighted_sum / total_weight if total_weight > 0 else 0.0


def calculate_confidence(vote_count: int) -> float:
    """Saturating confidence in [0, 1): 1 - e^(-k * n)."""
    if vote_count < 0:
        raise ValueError(f"vote_count must be non-negative, got {vote_count!r}")
    if vote_count == 0:
        return 0.0
    return min(1.0, 1.0 - math.exp(-CONFIDENCE_K * vote_count))


def aggregate_votes(votes: Sequence[NormalizedVote]) -> PhotoAggregate:
    """Recompute a photo's aggregate from its full vote set."""
    if not votes:
        return PhotoAggregate(vote_count=0)

    return PhotoAggregate(
        vote_count=len(votes),
        avg_attraction=calculate_weighted_average(votes, "attraction"),
        avg_trust=calculate_weighted_average(votes, "trust"),
        avg_intelligence=calculate_weighted_average(votes, "intelligence"),
        avg_confidence=calculate_confidence(len(votes)),
    )


def score_to_percentage(score: float) -> int:
    """Convert a 0-3 score to a 0-100 percentage for display."""
    return round((score / SCALE_MAX) * 100)


def score_to_1_to_10(score: float) -> int:
    """Convert a 0-3 score to the legacy 1-10 display scale (0 -> 1, 3 -> 10)."""
    return round(1 + (score / SCALE_MAX) * 9)


def is_meaningful(vote_count: int) -> bool:
    """Whether a photo has enough votes for its results to be presented as final."""
    return vote_count >= MEANINGFUL_VOTE_COUNT
