"""
Background Scheduler Service

Manages scheduled housekeeping using APScheduler:
- Expired photo skips are purged
- Idle voting sessions are discarded

This runs in-process with the FastAPI application.
"""

from datetime import timezone

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from db.session import async_session_maker
from services.pattern_detection import get_session_registry
from services.skip_service import SkipService

logger = structlog.get_logger(__name__)

# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None


async def skip_cleanup_job() -> None:
    """Delete skips whose exclusion window has passed."""
    try:
        async with async_session_maker() as db:
            removed = await SkipService(db).purge_expired()
        logger.info("skip_cleanup_completed", removed=removed)
    except Exception as e:
        logger.error("skip_cleanup_failed", error=str(e), exc_info=True)


async def session_cleanup_job() -> None:
    """Forget voting sessions that have been idle past the timeout."""
    get_session_registry().purge_idle()


def get_scheduler() -> AsyncIOScheduler:
    """Get the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(timezone=timezone.utc)
    return _scheduler


async def start_scheduler() -> None:
    """Start the background scheduler with all jobs."""
    scheduler = get_scheduler()

    if scheduler.running:
        logger.info("scheduler_already_running")
        return

    interval = IntervalTrigger(minutes=settings.SKIP_CLEANUP_INTERVAL_MINUTES)

    scheduler.add_job(
        skip_cleanup_job,
        trigger=interval,
        id="skip_cleanup",
        name="Skip Cleanup",
        replace_existing=True,
        max_instances=1,
    )
    scheduler.add_job(
        session_cleanup_job,
        trigger=interval,
        id="session_cleanup",
        name="Session Cleanup",
        replace_existing=True,
        max_instances=1,
    )

    scheduler.start()
    logger.info("scheduler_started", interval_minutes=settings.SKIP_CLEANUP_INTERVAL_MINUTES)


async def stop_scheduler() -> None:
    """Stop the background scheduler gracefully."""
    global _scheduler

    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")

    _scheduler = None
