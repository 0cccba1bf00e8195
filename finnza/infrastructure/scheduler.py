"""Background Scheduler — periodic sweep of the partner rate-limiter cache.

Invariants:
    - One cleanup job per scheduler (fixed id, replace_existing)
    - A failing sweep is logged and never kills the scheduler

Design Decisions:
    - APScheduler AsyncIOScheduler: the job is a coroutine on the app's event loop,
      so it never races the limiter from a worker thread
    - Built here, started/stopped by the FastAPI lifespan in main.py
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from finnza.infrastructure.rate_limiter import PartnerRateLimiter

logger = logging.getLogger(__name__)

CACHE_CLEANUP_JOB_ID = "partner_cache_cleanup"


async def run_cache_cleanup(limiter: PartnerRateLimiter) -> int:
    """Evict expired cache entries. Returns the number removed (0 on failure)."""
    try:
        removed = limiter.cleanup_expired()
    except Exception as e:
        logger.error(f"Partner cache cleanup failed: {e}", exc_info=True)
        return 0
    logger.debug(
        f"Partner cache cleanup removed {removed} entries",
        extra={"partner": limiter.partner},
    )
    return removed


def build_scheduler(
    limiter: PartnerRateLimiter, interval_minutes: int = 10,
) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        run_cache_cleanup,
        "interval",
        minutes=interval_minutes,
        args=[limiter],
        id=CACHE_CLEANUP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        f"Partner cache cleanup scheduled every {interval_minutes} minutes",
    )
    return scheduler
