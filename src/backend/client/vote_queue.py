"""
Client vote queue with retry and backoff.

Flow for one vote:
1. enqueue() persists it locally before any network call.
2. submit() counts an attempt and posts it.
3. Acknowledged (accepted, or 409 already recorded) -> removed.
   Refused outright (400, 404, 422) -> removed with a warning.
   Anything else, including a 401 from an expired token -> retried after
   min(BASE * 2^attempts, MAX) ms while attempts < MAX_ATTEMPTS, otherwise
   left in place until it ages out.

sync() re-attempts every retryable queued vote with random jitter. It runs on
start() and whenever connectivity or app visibility comes back.

Retries are APScheduler date jobs keyed by the queued vote id, so a vote never
has more than one attempt scheduled at a time.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from client.api_client import SubmissionOutcome, VotingApiClient
from client.config import ClientSettings, get_client_settings
from client.storage import PendingVoteStore, QueuedVote

logger = structlog.get_logger(__name__)


def retry_delay_ms(attempts: int, base_delay_ms: int = 1000, max_delay_ms: int = 30000) -> int:
    """Exponential backoff: base * 2^attempts, capped at max_delay_ms."""
    return min(base_delay_ms * (2 ** attempts), max_delay_ms)


class VoteQueue:
    """Durable outbox for votes."""

    def __init__(
        self,
        store: PendingVoteStore,
        api: VotingApiClient,
        scheduler: Optional[AsyncIOScheduler] = None,
        settings: Optional[ClientSettings] = None,
        jitter: Callable[[], float] = random.random,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.api = api
        self.scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        self.settings = settings or get_client_settings()
        self.jitter = jitter
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, token: str, settings: Optional[ClientSettings] = None) -> "VoteQueue":
        """Build a queue with a local store and API client configured from settings."""
        settings = settings or get_client_settings()
        return cls(
            store=PendingVoteStore.from_settings(settings),
            api=VotingApiClient(token=token, settings=settings),
            settings=settings,
        )

    def should_retry(self, vote: QueuedVote) -> bool:
        return vote.attempts < self.settings.MAX_ATTEMPTS

    def retry_delay_ms(self, attempts: int) -> int:
        return retry_delay_ms(attempts, self.settings.BASE_DELAY_MS, self.settings.MAX_DELAY_MS)

    def enqueue(self, photo_id: str, payload: dict[str, Any]) -> QueuedVote:
        """Persist a vote locally; nothing is sent yet."""
        return self.store.add(photo_id, payload)

    async def submit_vote(self, photo_id: str, payload: dict[str, Any]) -> bool:
        """Queue a vote and make the first attempt right away."""
        vote = self.enqueue(photo_id, payload)
        return await self.submit(vote.id)

    async def submit(self, vote_id: str) -> bool:
        """
        Make one attempt at sending a queued vote.

        Returns True once the server holds the vote. Transient failures
        schedule the next attempt instead of raising.
        """
        vote = self.store.mark_attempt(vote_id)
        if vote is None:
            return False

        result = await self.api.submit_vote(vote.payload, request_id=vote.id)

        if result.acknowledged:
            self.store.remove(vote.id)
            logger.info(
                "queued_vote_delivered",
                queued_vote_id=vote.id,
                attempts=vote.attempts,
                already_recorded=result.outcome == SubmissionOutcome.ALREADY_RECORDED,
            )
            return True

        if result.outcome == SubmissionOutcome.REJECTED:
            self.store.remove(vote.id)
            logger.warning(
                "queued_vote_rejected",
                queued_vote_id=vote.id,
                status_code=result.status_code,
                error=result.error,
            )
            return False

        if self.should_retry(vote):
            delay_ms = self.retry_delay_ms(vote.attempts)
            self._schedule(vote.id, delay_ms)
            logger.info(
                "vote_retry_scheduled",
                queued_vote_id=vote.id,
                attempts=vote.attempts,
                delay_ms=delay_ms,
                status_code=result.status_code,
            )
        else:
            logger.warning("queued_vote_abandoned", queued_vote_id=vote.id, attempts=vote.attempts)
        return False

    def sync(self) -> int:
        """Schedule a jittered attempt for every retryable queued vote."""
        scheduled = 0
        for vote in self.store.list_pending():
            if not self.should_retry(vote):
                continue
            self._schedule(vote.id, self.jitter() * self.settings.SYNC_JITTER_MS)
            scheduled += 1
        if scheduled:
            logger.info("queued_votes_sync", scheduled=scheduled)
        return scheduled

    def start(self) -> int:
        """Start the retry scheduler and sync whatever survived the last run."""
        if not self.scheduler.running:
            self.scheduler.start()
        return self.sync()

    def notify_online(self) -> int:
        return self.sync()

    def notify_visible(self, online: bool = True) -> int:
        return self.sync() if online else 0

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def _schedule(self, vote_id: str, delay_ms: float) -> None:
        run_date = self.clock() + timedelta(milliseconds=delay_ms)
        self.scheduler.add_job(
            self.submit,
            trigger=DateTrigger(run_date=run_date, timezone=timezone.utc),
            args=[vote_id],
            id=f"vote-retry-{vote_id}",
            replace_existing=True,
        )
