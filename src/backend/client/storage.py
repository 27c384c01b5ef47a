"""
Durable local storage for votes waiting to reach the server.

A vote is written here before any network attempt and removed only once the
server acknowledges it, so a crash or a lost connection never loses it.
Backed by a local SQLite file through SQLAlchemy.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

import structlog
from pydantic import BaseModel, ConfigDict
from sqlalchemy import JSON, DateTime, Integer, String, create_engine, delete, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from client.config import ClientSettings

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class QueueBase(DeclarativeBase):
    """Declarative base for the client-local tables."""


class PendingVote(QueueBase):
    """A vote not yet acknowledged by the server."""

    __tablename__ = "pending_votes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    photo_id: Mapped[str] = mapped_column(String(64), index=True)
    payload: Mapped[dict] = mapped_column(JSON)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class QueuedVote(BaseModel):
    """Detached snapshot of a pending vote."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    photo_id: str
    payload: dict[str, Any]
    attempts: int = 0
    created_at: datetime
    last_attempt_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: PendingVote) -> "QueuedVote":
        vote = cls.model_validate(row)
        vote.created_at = _as_utc(vote.created_at)
        vote.last_attempt_at = _as_utc(vote.last_attempt_at)
        return vote


class PendingVoteStore:
    """SQLite-backed table of pending votes."""

    def __init__(
        self,
        path: str,
        max_age: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.max_age = max_age
        self.clock = clock
        self.engine = create_engine(f"sqlite:///{path}")
        QueueBase.metadata.create_all(self.engine)
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "PendingVoteStore":
        return cls(settings.QUEUE_DB_PATH, max_age=timedelta(hours=settings.MAX_AGE_HOURS))

    def _session(self) -> Session:
        return self._session_factory()

    def add(self, photo_id: str, payload: dict[str, Any]) -> QueuedVote:
        """Persist a new vote with zero attempts."""
        row = PendingVote(
            id=str(uuid4()),
            photo_id=photo_id,
            payload=dict(payload),
            attempts=0,
            created_at=self.clock(),
            last_attempt_at=None,
        )
        with self._session() as session, session.begin():
            session.add(row)
        logger.debug("vote_queued", queued_vote_id=row.id, photo_id=photo_id)
        return QueuedVote.from_row(row)

    def get(self, vote_id: str) -> Optional[QueuedVote]:
        with self._session() as session:
            row = session.get(PendingVote, vote_id)
            return QueuedVote.from_row(row) if row else None

    def mark_attempt(self, vote_id: str) -> Optional[QueuedVote]:
        """Increment the attempt counter; None if the vote is gone."""
        with self._session() as session, session.begin():
            row = session.get(PendingVote, vote_id)
            if row is None:
                return None
            row.attempts += 1
            row.last_attempt_at = self.clock()
            session.flush()
            return QueuedVote.from_row(row)

    def remove(self, vote_id: str) -> bool:
        with self._session() as session, session.begin():
            result = session.execute(delete(PendingVote).where(PendingVote.id == vote_id))
            return (result.rowcount or 0) > 0

    def list_pending(self) -> list[QueuedVote]:
        """
        All pending votes, oldest first.

        Votes older than max_age are deleted here, whatever their attempt count.
        """
        cutoff = self.clock() - self.max_age
        with self._session() as session, session.begin():
            rows = session.execute(select(PendingVote).order_by(PendingVote.created_at)).scalars().all()
            pending = []
            for row in rows:
                vote = QueuedVote.from_row(row)
                if vote.created_at <= cutoff:
                    session.delete(row)
                    logger.info("queued_vote_expired", queued_vote_id=vote.id, attempts=vote.attempts)
                    continue
                pending.append(vote)
            return pending

    def __len__(self) -> int:
        with self._session() as session:
            return len(session.execute(select(PendingVote.id)).all())

    def close(self) -> None:
        self.engine.dispose()
