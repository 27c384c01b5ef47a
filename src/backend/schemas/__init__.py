"""Schemas module initialization."""

from schemas.photo import AxisScore, PhotoScores
from schemas.vote import (
    NextPhotoResponse,
    PhotoOut,
    SessionEndResponse,
    SkipRequest,
    SkipResponse,
    VoteCreate,
    VoteFeedbackIn,
    VoteMetadataIn,
    VoteResponse,
    WarningAckResponse,
)

__all__ = [
    "AxisScore",
    "PhotoScores",
    "NextPhotoResponse",
    "PhotoOut",
    "SessionEndResponse",
    "SkipRequest",
    "SkipResponse",
    "VoteCreate",
    "VoteFeedbackIn",
    "VoteMetadataIn",
    "VoteResponse",
    "WarningAckResponse",
]
