"""
Tests for photo results endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.integration
class TestPhotoScores:
    """Test the owner-only scores endpoint."""

    async def test_owner_sees_scores(self, client: AsyncClient, auth_headers_for, make_user, make_photo) -> None:
        owner = await make_user()
        photo = await make_photo(owner.id)
        rater = await make_user()

        vote = {"photo_id": photo.id, "attraction": 3, "trust": 2, "intelligence": 1}
        response = await client.post("/api/v1/votes", json=vote, headers=auth_headers_for(rater.id))
        assert response.status_code == 201

        response = await client.get(f"/api/v1/photos/{photo.id}/scores", headers=auth_headers_for(owner.id))
        assert response.status_code == 200
        data = response.json()
        assert data["vote_count"] == 1
        assert data["is_meaningful"] is False
        assert data["confidence"] == pytest.approx(0.0488, abs=1e-3)
        assert data["attraction"] == {"score": 3.0, "percentage": 100, "one_to_ten": 10}
        assert data["intelligence"]["percentage"] == 33

    async def test_no_votes_yet(self, client: AsyncClient, auth_headers_for, make_user, make_photo) -> None:
        owner = await make_user()
        photo = await make_photo(owner.id)

        response = await client.get(f"/api/v1/photos/{photo.id}/scores", headers=auth_headers_for(owner.id))
        data = response.json()
        assert data["vote_count"] == 0
        assert data["attraction"] is None
        assert data["confidence"] == 0.0

    async def test_non_owner_gets_404(self, client: AsyncClient, auth_headers_for, make_user, make_photo) -> None:
        owner = await make_user()
        other = await make_user()
        photo = await make_photo(owner.id)

        response = await client.get(f"/api/v1/photos/{photo.id}/scores", headers=auth_headers_for(other.id))
        assert response.status_code == 404
