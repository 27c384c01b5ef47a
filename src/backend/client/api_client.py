"""
HTTP client for the voting API.

Submission results are classified so the vote queue knows whether to
forget a vote, drop it, or try again later.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import httpx
import structlog

from client.config import ClientSettings, get_client_settings

logger = structlog.get_logger(__name__)

# Definitive refusals of the vote itself (validation, unknown photo, business rule)
REJECTED_STATUS_CODES = frozenset({400, 404, 422})


class SubmissionOutcome(str, Enum):
    ACCEPTED = "accepted"
    ALREADY_RECORDED = "already_recorded"  # 409: an earlier attempt got through
    REJECTED = "rejected"  # 400, 404, 422: the server refused the vote itself
    RETRYABLE = "retryable"  # Transport errors, timeouts, auth failures, 5xx, 429


@dataclass(frozen=True)
class SubmissionResult:
    outcome: SubmissionOutcome
    status_code: Optional[int] = None
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def acknowledged(self) -> bool:
        """The server holds this vote; it can leave the queue."""
        return self.outcome in (SubmissionOutcome.ACCEPTED, SubmissionOutcome.ALREADY_RECORDED)

    @property
    def retryable(self) -> bool:
        return self.outcome == SubmissionOutcome.RETRYABLE


def classify_response(response: httpx.Response) -> SubmissionResult:
    """Map an HTTP response of POST /votes to a submission outcome."""
    code = response.status_code
    if code < 300:
        return SubmissionResult(SubmissionOutcome.ACCEPTED, code, data=response.json())
    if code == 409:
        return SubmissionResult(SubmissionOutcome.ALREADY_RECORDED, code)
    if code in REJECTED_STATUS_CODES:
        return SubmissionResult(SubmissionOutcome.REJECTED, code, error=response.text)
    # Expired tokens (401), 403, 408, 429 and 5xx may succeed on a later attempt
    return SubmissionResult(SubmissionOutcome.RETRYABLE, code, error=response.text)


class VotingApiClient:
    """Async client for the rater-facing voting endpoints."""

    def __init__(
        self,
        token: str,
        settings: Optional[ClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_client_settings()
        self._client = httpx.AsyncClient(
            base_url=self.settings.API_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "VotingApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def set_token(self, token: str) -> None:
        """Swap in a refreshed access token; queued retries pick it up."""
        self._client.headers["Authorization"] = f"Bearer {token}"

    async def get_next_photo(self) -> Optional[dict[str, Any]]:
        """Next photo descriptor, or None when nothing is left to rate."""
        response = await self._client.get("/votes/next")
        response.raise_for_status()
        body = response.json()
        return None if body.get("no_more_photos") else body.get("photo")

    async def submit_vote(self, payload: dict[str, Any], request_id: Optional[str] = None) -> SubmissionResult:
        """Submit a vote; never raises for network or server failures."""
        headers = {"X-Request-ID": request_id} if request_id else None
        try:
            response = await self._client.post("/votes", json=payload, headers=headers)
        except httpx.TransportError as e:
            # Includes timeouts and connection failures
            logger.warning("vote_submission_transport_error", error=str(e), error_type=type(e).__name__)
            return SubmissionResult(SubmissionOutcome.RETRYABLE, error=str(e))
        return classify_response(response)

    async def skip_photo(self, photo_id: str) -> bool:
        """Skip a photo. Failures are logged and reported as success."""
        try:
            response = await self._client.post("/votes/skip", json={"photo_id": photo_id})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("photo_skip_request_failed", photo_id=photo_id, error=str(e))
        return True

    async def acknowledge_warning(self) -> None:
        response = await self._client.post("/votes/warning/ack")
        response.raise_for_status()
