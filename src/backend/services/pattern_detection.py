"""
Voting Pattern Detection.

Flags raters who vote with low rigor (near-identical ratings in a row) and
drives the warn-once-then-penalize karma policy:
- No pattern: full karma, and any active penalty is lifted.
- First pattern in a session: full karma, the rater is warned.
- Pattern again after the warning was acknowledged: zero karma for that vote.

Pattern memory is session-scoped. A VotingSession owns the recent vote
window and the warning/penalty flags; SessionRegistry maps session ids to
sessions and discards idle ones.
"""

import asyncio
import math
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

import structlog

from core.config import settings
from core.dates import utc_now

logger = structlog.get_logger(__name__)

# Number of most recent votes inspected for a pattern
MIN_VOTES_FOR_PATTERN = 5

# Flattened standard deviation below which a sequence counts as low rigor
LOW_RIGOR_VARIANCE_THRESHOLD = 0.3

# Votes remembered per session
RECENT_WINDOW_SIZE = 10

RecentVote = tuple[int, int, int]


def calculate_vote_variance(votes: Sequence[Sequence[float]]) -> float:
    """
    Population standard deviation of all axis values of the given votes.

    Despite the name this returns a standard deviation, which reads on the
    same 0-3 scale as the ratings themselves.
    """
    if len(votes) <= 1:
        return 0.0

    scores = [float(score) for vote in votes for score in vote]
    if not scores:
        return 0.0

    mean = sum(scores) / len(scores)
    variance = sum((score - mean) ** 2 for score in scores) / len(scores)
    return math.sqrt(variance)


def detect_low_rigor_pattern(history: Sequence[Sequence[float]]) -> bool:
    """True when the last MIN_VOTES_FOR_PATTERN votes are nearly identical."""
    if len(history) < MIN_VOTES_FOR_PATTERN:
        return False

    recent = list(history)[-MIN_VOTES_FOR_PATTERN:]
    return calculate_vote_variance(recent) < LOW_RIGOR_VARIANCE_THRESHOLD


def should_show_warning(pattern_detected: bool, warning_shown: bool) -> bool:
    """The warning is shown once per session, on the first detection."""
    return pattern_detected and not warning_shown


def calculate_karma_with_penalty(base_karma: int, pattern_detected: bool, warning_shown: bool) -> int:
    """Full karma unless the pattern persists after the warning was shown."""
    if not pattern_detected:
        return base_karma
    if not warning_shown:
        return base_karma
    return 0


@dataclass(frozen=True)
class PatternAssessment:
    """Outcome of adding one prospective vote to a session window."""

    pattern_detected: bool
    warning_shown: bool

    @property
    def show_warning(self) -> bool:
        return should_show_warning(self.pattern_detected, self.warning_shown)

    @property
    def penalized(self) -> bool:
        return self.pattern_detected and self.warning_shown

    def karma_for(self, base_karma: int) -> int:
        return calculate_karma_with_penalty(base_karma, self.pattern_detected, self.warning_shown)


@dataclass
class VotingSession:
    """
    Per-session pattern state.

    The window holds raw ratings of the last RECENT_WINDOW_SIZE accepted votes.
    assess() is side-effect free so a vote that fails to persist leaves the
    session untouched; record() applies the outcome after commit.
    """

    session_id: str
    window: deque = field(default_factory=lambda: deque(maxlen=RECENT_WINDOW_SIZE))
    warning_shown: bool = False
    warning_pending: bool = False
    penalized: bool = False
    last_seen: datetime = field(default_factory=utc_now)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, compare=False, repr=False)

    def assess(self, ratings: RecentVote) -> PatternAssessment:
        prospective = list(self.window)[-(RECENT_WINDOW_SIZE - 1):] + [tuple(ratings)]
        return PatternAssessment(
            pattern_detected=detect_low_rigor_pattern(prospective),
            warning_shown=self.warning_shown,
        )

    def record(self, ratings: RecentVote, assessment: PatternAssessment) -> None:
        self.window.append(tuple(ratings))
        self.last_seen = utc_now()

        if not assessment.pattern_detected:
            # Recovery restores full rewards; the warning stays spent
            self.penalized = False
        elif self.warning_shown:
            self.penalized = True
        else:
            self.warning_pending = True

        if assessment.pattern_detected:
            logger.info(
                "low_rigor_pattern_detected",
                session_id=self.session_id,
                warning_shown=self.warning_shown,
                penalized=self.penalized,
            )

    def acknowledge_warning(self) -> None:
        self.warning_pending = False
        self.warning_shown = True
        self.last_seen = utc_now()

    def reset(self) -> None:
        self.window.clear()
        self.warning_shown = False
        self.warning_pending = False
        self.penalized = False


class SessionRegistry:
    """In-process registry of voting sessions keyed by session id."""

    def __init__(self, idle_timeout: timedelta = timedelta(minutes=30)):
        self.idle_timeout = idle_timeout
        self._sessions: dict[str, VotingSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> Optional[VotingSession]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> VotingSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = VotingSession(session_id=session_id)
            self._sessions[session_id] = session
            logger.debug("voting_session_started", session_id=session_id)
        session.last_seen = utc_now()
        return session

    def end(self, session_id: str) -> bool:
        """Discard a session and its pattern memory."""
        return self._sessions.pop(session_id, None) is not None

    def purge_idle(self, now: Optional[datetime] = None) -> int:
        """Drop sessions idle for longer than the timeout; returns how many."""
        cutoff = (now or utc_now()) - self.idle_timeout
        stale = [sid for sid, session in self._sessions.items() if session.last_seen < cutoff]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.info("voting_sessions_purged", count=len(stale))
        return len(stale)


# Global instance
session_registry = SessionRegistry(idle_timeout=timedelta(minutes=settings.SESSION_IDLE_TIMEOUT_MINUTES))


def get_session_registry() -> SessionRegistry:
    """Dependency for getting the voting session registry."""
    return session_registry
