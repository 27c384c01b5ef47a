"""
Tests for API dependencies.
"""

import hashlib
from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from api.deps import CurrentRater, get_current_rater, get_voting_session
from services.pattern_detection import SessionRegistry


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.unit
class TestGetCurrentRater:
    """Test bearer token resolution."""

    async def test_valid_token(self, issue_token) -> None:
        token = issue_token({"sub": "rater-1", "sid": "session-9"})
        rater = await get_current_rater(_credentials(token))
        assert rater == CurrentRater(id="rater-1", session_id="session-9")

    async def test_session_falls_back_to_token_hash(self, issue_token) -> None:
        token = issue_token({"sub": "rater-1"})
        rater = await get_current_rater(_credentials(token))
        assert rater.session_id == hashlib.sha256(token.encode()).hexdigest()[:16]

    async def test_invalid_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_rater(_credentials("garbage"))
        assert exc_info.value.status_code == 401

    async def test_expired_token(self, issue_token) -> None:
        token = issue_token({"sub": "rater-1"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(HTTPException) as exc_info:
            await get_current_rater(_credentials(token))
        assert exc_info.value.status_code == 401

    async def test_token_without_subject(self, issue_token) -> None:
        token = issue_token({"sid": "session-1"})
        with pytest.raises(HTTPException) as exc_info:
            await get_current_rater(_credentials(token))
        assert exc_info.value.detail == "Invalid token payload"

    async def test_refresh_token_rejected(self, issue_token) -> None:
        token = issue_token({"sub": "rater-1", "type": "refresh"})
        with pytest.raises(HTTPException) as exc_info:
            await get_current_rater(_credentials(token))
        assert exc_info.value.status_code == 401


@pytest.mark.unit
class TestGetVotingSession:
    """Test session lookup."""

    async def test_same_session_for_same_id(self) -> None:
        registry = SessionRegistry()
        rater = CurrentRater(id="rater-1", session_id="s1")

        first = await get_voting_session(rater, registry)
        second = await get_voting_session(rater, registry)

        assert first is second
        assert first.session_id == "s1"

    async def test_distinct_sessions(self) -> None:
        registry = SessionRegistry()
        a = await get_voting_session(CurrentRater(id="r", session_id="a"), registry)
        b = await get_voting_session(CurrentRater(id="r", session_id="b"), registry)
        assert a is not b
