"""
Tests for photo score aggregation.
"""

import pytest

from services.aggregation import (
    aggregate_votes,
    calculate_confidence,
    calculate_weighted_average,
    is_meaningful,
    score_to_1_to_10,
    score_to_percentage,
)
from services.normalization import NormalizedVote


def _vote(value: float, weight: float = 1.0) -> NormalizedVote:
    return NormalizedVote(attraction=value, trust=value, intelligence=value, weight=weight)


@pytest.mark.unit
class TestWeightedAverage:
    """Test weighted per-axis means."""

    def test_empty_is_zero(self) -> None:
        assert calculate_weighted_average([], "trust") == 0.0

    def test_zero_total_weight_is_zero(self) -> None:
        assert calculate_weighted_average([_vote(2.0, weight=0.0)], "trust") == 0.0

    def test_equal_weights_is_arithmetic_mean(self) -> None:
        votes = [_vote(3.0, 0.7), _vote(1.0, 0.7), _vote(2.0, 0.7)]
        assert calculate_weighted_average(votes, "attraction") == pytest.approx(2.0)

    def test_heavier_vote_pulls_toward_itself(self) -> None:
        votes = [_vote(3.0, 0.5), _vote(1.2, 1.5)]
        assert calculate_weighted_average(votes, "intelligence") == pytest.approx(1.65)

    def test_reads_only_requested_axis(self) -> None:
        vote = NormalizedVote(attraction=3.0, trust=0.0, intelligence=1.0, weight=1.0)
        assert calculate_weighted_average([vote], "trust") == 0.0

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValueError):
            calculate_weighted_average([_vote(2.0), _vote(1.0, weight=-0.5)], "trust")


@pytest.mark.unit
class TestConfidence:
    """Test the saturating confidence curve."""

    def test_zero_votes(self) -> None:
        assert calculate_confidence(0) == 0.0

    def test_negative_votes_rejected(self) -> None:
        with pytest.raises(ValueError):
            calculate_confidence(-3)

    @pytest.mark.parametrize(
        "count,expected",
        [(1, 0.0488), (20, 0.632), (50, 0.918), (100, 0.993)],
    )
    def test_reference_points(self, count: int, expected: float) -> None:
        assert calculate_confidence(count) == pytest.approx(expected, abs=1e-3)

    def test_monotonic_and_bounded(self) -> None:
        values = [calculate_confidence(n) for n in range(0, 2000, 7)]
        assert values == sorted(values)
        assert all(0.0 <= v <= 1.0 for v in values)
        assert calculate_confidence(10**9) <= 1.0


@pytest.mark.unit
class TestAggregateVotes:
    """Test full aggregate recomputation."""

    def test_no_votes_leaves_averages_undefined(self) -> None:
        aggregate = aggregate_votes([])
        assert aggregate.vote_count == 0
        assert aggregate.avg_attraction is None
        assert aggregate.avg_confidence is None

    def test_single_vote(self) -> None:
        vote = NormalizedVote(attraction=3.0, trust=2.0, intelligence=1.0, weight=0.5)
        aggregate = aggregate_votes([vote])
        assert aggregate.vote_count == 1
        assert aggregate.avg_attraction == pytest.approx(3.0)
        assert aggregate.avg_trust == pytest.approx(2.0)
        assert aggregate.avg_intelligence == pytest.approx(1.0)
        assert aggregate.avg_confidence == pytest.approx(0.0488, abs=1e-4)


@pytest.mark.unit
class TestDisplayConversions:
    """Test score display helpers."""

    @pytest.mark.parametrize("score,expected", [(0.0, 0), (1.5, 50), (3.0, 100), (2.0, 67)])
    def test_percentage(self, score: float, expected: int) -> None:
        assert score_to_percentage(score) == expected

    @pytest.mark.parametrize("score,expected", [(0.0, 1), (1.5, 6), (3.0, 10)])
    def test_one_to_ten(self, score: float, expected: int) -> None:
        assert score_to_1_to_10(score) == expected

    def test_meaningful_threshold(self) -> None:
        assert not is_meaningful(19)
        assert is_meaningful(20)
