"""
Tests for the photo repository.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from services.aggregation import PhotoAggregate


@pytest.fixture
def mock_session():
    """Create a mock database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.mark.unit
class TestPhotoRepository:
    """Test PhotoRepository operations."""

    async def test_get_for_update_locks_row(self, mock_session) -> None:
        from repositories.photo_repository import PhotoRepository

        mock_photo = MagicMock()
        mock_result = MagicMock()
        mock_result.scalar_one_or_none = MagicMock(return_value=mock_photo)
        mock_session.execute = AsyncMock(return_value=mock_result)

        repo = PhotoRepository(mock_session)
        assert await repo.get_for_update("photo-1") is mock_photo

        statement = mock_session.execute.call_args.args[0]
        assert statement._for_update_arg is not None

    async def test_update_aggregate(self, mock_session) -> None:
        from repositories.photo_repository import PhotoRepository

        mock_result = MagicMock()
        mock_result.rowcount = 1
        mock_session.execute = AsyncMock(return_value=mock_result)

        repo = PhotoRepository(mock_session)
        updated = await repo.update_aggregate(
            "photo-1",
            PhotoAggregate(vote_count=1, avg_attraction=3.0, avg_trust=2.0, avg_intelligence=1.0, avg_confidence=0.05),
        )

        assert updated is True
        mock_session.execute.assert_called_once()

    async def test_update_aggregate_missing_photo(self, mock_session) -> None:
        from repositories.photo_repository import PhotoRepository

        mock_result = MagicMock()
        mock_result.rowcount = 0
        mock_session.execute = AsyncMock(return_value=mock_result)

        repo = PhotoRepository(mock_session)
        assert await repo.update_aggregate("missing", PhotoAggregate(vote_count=0)) is False
