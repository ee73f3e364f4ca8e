"""APScheduler integration for the periodic lifecycle sweep."""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from campus_events.core.config import get_settings
from campus_events.core.logging import get_logger, job_context
from campus_events.db.session import AsyncSessionLocal
from campus_events.services.sweeper_service import auto_update_events

logger = get_logger(__name__)
settings = get_settings()

SWEEP_JOB_ID = "event-sweep"

_scheduler: Optional[AsyncIOScheduler] = None


async def run_scheduled_sweep() -> list[int]:
    """Run one sweep in its own session and transaction."""
    with job_context(SWEEP_JOB_ID):
        async with AsyncSessionLocal() as session:
            try:
                closed = await auto_update_events(session, trigger="scheduled")
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("scheduled_sweep_failed")
                raise
    return closed


def start_scheduler() -> AsyncIOScheduler:
    global _scheduler
    if _scheduler and _scheduler.running:
        return _scheduler
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        run_scheduled_sweep,
        "interval",
        seconds=settings.SWEEP_INTERVAL_SECONDS,
        id=SWEEP_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    _scheduler = scheduler
    logger.info("scheduler_started", sweep_interval_seconds=settings.SWEEP_INTERVAL_SECONDS)
    return scheduler


def stop_scheduler() -> None:
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        _scheduler = None


def scheduler_running() -> bool:
    return bool(_scheduler and _scheduler.running)
