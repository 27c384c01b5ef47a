"""
Vote Normalization Engine.

Adjusts a rater's raw 0-3 ratings to compensate for individual bias:
- Lenient raters (history averaging above the baseline) are pulled down.
- Harsh raters (history averaging below the baseline) are pushed up.
- Flat raters (clustered ratings) are stretched, wide raters compressed.

Corrections only kick in once a rater has MIN_VOTES_FOR_STATS votes of
history; before that the vote passes through unchanged at a reduced weight.
"""

import math
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

# Scale bounds (0=No, 1=A little, 2=Yes, 3=Very)
SCALE_MIN = 0.0
SCALE_MAX = 3.0

# Global baseline for a typical rater
GLOBAL_MEAN = 1.5
GLOBAL_STD = 0.9

# Minimum history before bias/rigor are trusted
MIN_VOTES_FOR_STATS = 10

# History size at which a rater earns full weight
FULL_WEIGHT_VOTES = 50


def _check_score(score: float) -> float:
    if not SCALE_MIN <= score <= SCALE_MAX:
        raise ValueError(f"score {score!r} outside {SCALE_MIN}-{SCALE_MAX}")
    return float(score)


class VoterStatistics(BaseModel):
    """Rater history summary, derived from all of their past raw ratings."""

    average_score: float = GLOBAL_MEAN
    standard_deviation: float = 0.0
    total_votes: int = Field(0, ge=0)


class Ratings(BaseModel):
    """Raw ratings on the three axes; integers only (no floats, strings or bools)."""

    model_config = ConfigDict(strict=True)

    attraction: int = Field(..., ge=0, le=3)
    trust: int = Field(..., ge=0, le=3)
    intelligence: int = Field(..., ge=0, le=3)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.attraction, self.trust, self.intelligence)


class NormalizedVote(BaseModel):
    """Corrected ratings plus the correction parameters that produced them."""

    attraction: float
    trust: float
    intelligence: float
    weight: float
    bias: float = 0.0
    rigor: float = 1.0


def compute_voter_statistics(history: Iterable[Sequence[int]]) -> VoterStatistics:
    """
    Summarize a rater's raw vote history.

    Each history entry is one vote's (attraction, trust, intelligence). Mean and
    population standard deviation are taken over all axis values flattened
    together; total_votes counts votes, not axis values.

    Raises:
        ValueError: If a vote does not hold three scores within the scale.
    """
    scores: list[float] = []
    total_votes = 0
    for vote in history:
        if len(vote) != 3:
            raise ValueError(f"expected 3 axis scores per vote, got {len(vote)}")
        total_votes += 1
        scores.extend(_check_score(score) for score in vote)

    if total_votes == 0 or not scores:
        return VoterStatistics()

    mean = sum(scores) / len(scores)
    variance = sum((score - mean) ** 2 for score in scores) / len(scores)
    return VoterStatistics(
        average_score=mean,
        standard_deviation=math.sqrt(variance),
        total_votes=total_votes,
    )


def calculate_bias(stats: VoterStatistics) -> float:
    """Positive = lenient, negative = harsh. Zero without enough history."""
    if stats.total_votes < MIN_VOTES_FOR_STATS:
        return 0.0
    return stats.average_score - GLOBAL_MEAN


def calculate_rigor(stats: VoterStatistics) -> float:
    """Above 1 = uses the whole scale, below 1 = clustered. One without enough history."""
    if stats.total_votes < MIN_VOTES_FOR_STATS:
        return 1.0
    return stats.standard_deviation / GLOBAL_STD


def calculate_weight(stats: VoterStatistics) -> float:
    """Trust factor growing with experience: 0.5 new, 0.7 -> 1.0 ramp, 1.0 veteran."""
    total_votes = stats.total_votes
    if total_votes < MIN_VOTES_FOR_STATS:
        return 0.5
    if total_votes < FULL_WEIGHT_VOTES:
        return 0.7 + (total_votes - MIN_VOTES_FOR_STATS) * 0.0075
    return 1.0


def normalize_score(raw_score: float, bias: float, rigor: float) -> float:
    """Apply bias then rigor correction to one axis value and clamp to the scale."""
    if rigor < 0:
        raise ValueError(f"rigor must be non-negative, got {rigor!r}")
    normalized = _check_score(raw_score) - bias

    # Re-center on the baseline and rescale the spread
    if rigor != 0:
        normalized = GLOBAL_MEAN + (normalized - GLOBAL_MEAN) / rigor

    return max(SCALE_MIN, min(SCALE_MAX, normalized))


def normalize_vote(ratings: Ratings, stats: VoterStatistics) -> NormalizedVote:
    """Normalize all three axes with one bias/rigor/weight from the rater's history."""
    bias = calculate_bias(stats)
    rigor = calculate_rigor(stats)
    weight = calculate_weight(stats)

    return NormalizedVote(
        attraction=normalize_score(ratings.attraction, bias, rigor),
        trust=normalize_score(ratings.trust, bias, rigor),
        intelligence=normalize_score(ratings.intelligence, bias, rigor),
        weight=weight,
        bias=bias,
        rigor=rigor,
    )
