"""
Shared dependencies for API endpoints.

Includes:
- Rater JWT authentication (tokens are issued by the account service)
- Voting session lookup
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from core.security import decode_token, session_id_from_token
from services.pattern_detection import SessionRegistry, VotingSession, get_session_registry

logger = structlog.get_logger(__name__)

# Security schemes
security = HTTPBearer()


class CurrentRater(BaseModel):
    """Authenticated rater and the voting session their token belongs to."""

    id: str
    session_id: str


# =============================================================================
# Rater Authentication (JWT-based)
# =============================================================================


async def get_current_rater(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> CurrentRater:
    """
    Extract and validate the current rater from the JWT token.

    Raises:
        HTTPException: If the token is invalid or carries no subject.
    """
    token = credentials.credentials
    payload = decode_token(token, expected_type="access")

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    rater_id = payload.get("sub")
    if rater_id is None:
        logger.warning("token_without_subject")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentRater(id=str(rater_id), session_id=session_id_from_token(token, payload))


# =============================================================================
# Voting Sessions
# =============================================================================


async def get_voting_session(
    current_rater: Annotated[CurrentRater, Depends(get_current_rater)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> VotingSession:
    """Get (or start) the voting session of the current rater."""
    return registry.get_or_create(current_rater.session_id)
