"""
Tests for vote repository.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from services.normalization import NormalizedVote, Ratings


@pytest.fixture
def mock_session():
    """Create a mock database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.mark.unit
class TestVoteRepository:
    """Test VoteRepository operations."""

    async def test_exists_for_true(self, mock_session) -> None:
        from repositories.vote_repository import VoteRepository

        mock_result = MagicMock()
        mock_result.scalar = MagicMock(return_value=1)
        mock_session.execute = AsyncMock(return_value=mock_result)

        repo = VoteRepository(mock_session)
        assert await repo.exists_for("photo-1", "rater-1") is True

    async def test_exists_for_false(self, mock_session) -> None:
        from repositories.vote_repository import VoteRepository

        mock_result = MagicMock()
        mock_result.scalar = MagicMock(return_value=0)
        mock_session.execute = AsyncMock(return_value=mock_result)

        repo = VoteRepository(mock_session)
        assert await repo.exists_for("photo-1", "rater-1") is False

    async def test_create_flushes_vote(self, mock_session) -> None:
        from repositories.vote_repository import VoteRepository

        repo = VoteRepository(mock_session)
        vote = await repo.create(
            photo_id="photo-1",
            voter_id="rater-1",
            ratings=Ratings(attraction=3, trust=2, intelligence=1),
            normalized=NormalizedVote(attraction=2.5, trust=1.5, intelligence=0.5, weight=0.7, bias=0.5),
            feeling_tags=["Vibe boa"],
        )

        mock_session.add.assert_called_once_with(vote)
        mock_session.flush.assert_awaited_once()
        assert vote.attraction == 3
        assert vote.normalized_attraction == 2.5
        assert vote.voter_weight == 0.7
        assert vote.voter_bias == 0.5
        assert vote.feedback_feeling_tags == ["Vibe boa"]
        assert vote.feedback_suggestion_tags == []

    async def test_get_rating_history(self, mock_session) -> None:
        from repositories.vote_repository import VoteRepository

        mock_result = MagicMock()
        mock_result.all = MagicMock(return_value=[(3, 2, 1), (0, 0, 1)])
        mock_session.execute = AsyncMock(return_value=mock_result)

        repo = VoteRepository(mock_session)
        assert await repo.get_rating_history("rater-1") == [(3, 2, 1), (0, 0, 1)]

    async def test_get_normalized_votes(self, mock_session) -> None:
        from repositories.vote_repository import VoteRepository

        mock_result = MagicMock()
        mock_result.all = MagicMock(return_value=[(2.5, 1.5, 0.5, 0.7)])
        mock_session.execute = AsyncMock(return_value=mock_result)

        repo = VoteRepository(mock_session)
        votes = await repo.get_normalized_votes("photo-1")

        assert len(votes) == 1
        assert votes[0].attraction == 2.5
        assert votes[0].weight == 0.7
