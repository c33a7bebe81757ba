import asyncio
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from fightnight.config import settings
from fightnight.dependencies import get_notifier
from fightnight.metrics import SCHEDULER_LAST_TICK
from fightnight.services.notifier import Notifier
from fightnight.timeutil import top_of_hour

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=timezone.utc)

# Ticks run end-to-end: a slow tick delays the next one instead of overlapping it
_tick_lock = asyncio.Lock()
_notifier: Notifier | None = None


def start_scheduler(notifier: Notifier | None = None):
    """Start the hourly notifier job, aligned to the top of each UTC hour."""
    global _notifier
    _notifier = notifier or get_notifier()
    scheduler.add_job(
        run_tick,
        "cron",
        minute=0,
        id="hourly_notify",
        replace_existing=True,
        max_instances=2,  # the second instance waits on _tick_lock
        coalesce=True,
        misfire_grace_time=15 * 60,
    )
    if settings.run_on_start:
        scheduler.add_job(run_tick, id="startup_notify", replace_existing=True)
    scheduler.start()
    logger.info("Scheduler started: notifier runs at minute 0 of every UTC hour")

def stop_scheduler():
    """Shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")

async def run_tick(notifier: Notifier | None = None, now: datetime | None = None):
    """Run one notifier pass for the hour in which it was triggered."""
    notifier = notifier or _notifier or get_notifier()
    # Pin the tick to its own hour before waiting for a previous tick to finish
    tick_at = top_of_hour(now or datetime.now(timezone.utc))
    async with _tick_lock:
        logger.info("Notifier tick for %s starting", tick_at.isoformat())
        outcomes = await notifier.run_once(tick_at)
        SCHEDULER_LAST_TICK.set_to_current_time()
    return outcomes
