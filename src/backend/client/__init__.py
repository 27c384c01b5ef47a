"""Rater-side client: voting API access and the durable vote queue."""

from client.api_client import SubmissionOutcome, SubmissionResult, VotingApiClient
from client.config import ClientSettings, get_client_settings
from client.storage import PendingVoteStore, QueuedVote
from client.vote_queue import VoteQueue, retry_delay_ms

__all__ = [
    "ClientSettings",
    "PendingVoteStore",
    "QueuedVote",
    "SubmissionOutcome",
    "SubmissionResult",
    "VoteQueue",
    "VotingApiClient",
    "get_client_settings",
    "retry_delay_ms",
]
