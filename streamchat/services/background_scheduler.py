"""
Background scheduler service for periodic jobs.

Handles periodic housekeeping such as pruning expired rate-limit windows.
Uses APScheduler for in-process scheduling without external dependencies.
"""

from __future__ import annotations

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from streamchat.core.config import get_settings
from streamchat.core.logger import logger
from streamchat.interfaces.rate_limiter import IRateLimiter


class BackgroundScheduler:
    """
    Background scheduler for periodic jobs.

    Features:
    - Rate-limit window cleanup (every RATE_LIMIT_CLEANUP_MINUTES)
    """

    def __init__(self, rate_limiter: IRateLimiter, cleanup_minutes: int = 5):
        self._rate_limiter = rate_limiter
        self._cleanup_minutes = cleanup_minutes
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    async def start(self):
        """Start the scheduler."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.ENVIRONMENT == "test":
            logger.info("Background scheduler disabled in test environment")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._run_rate_limit_cleanup,
            IntervalTrigger(minutes=self._cleanup_minutes),
            id="rate_limit_cleanup",
            name="Rate Limit Cleanup",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Background scheduler started:\n"
            f"  - Rate limit cleanup: every {self._cleanup_minutes} minutes"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background scheduler stopped")

    async def _run_rate_limit_cleanup(self):
        try:
            removed = await self._rate_limiter.cleanup()
            if removed:
                logger.debug(f"Removed {removed} expired rate limit windows")
        except Exception as e:
            logger.error(f"Rate limit cleanup failed: {e}")


# Global scheduler instance
_scheduler: Optional[BackgroundScheduler] = None


async def get_background_scheduler() -> BackgroundScheduler:
    """Get the global background scheduler instance."""
    global _scheduler
    if _scheduler is None:
        from streamchat.api.deps import get_rate_limiter

        _scheduler = BackgroundScheduler(
            rate_limiter=get_rate_limiter(),
            cleanup_minutes=get_settings().RATE_LIMIT_CLEANUP_MINUTES,
        )
    return _scheduler


async def start_background_scheduler():
    """Start the global background scheduler."""
    scheduler = await get_background_scheduler()
    await scheduler.start()


async def stop_background_scheduler():
    """Stop the global background scheduler."""
    global _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
