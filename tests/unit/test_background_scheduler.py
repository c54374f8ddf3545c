"""
Unit tests for BackgroundScheduler.
"""

from unittest.mock import AsyncMock

import pytest

from streamchat.interfaces.rate_limiter import IRateLimiter
from streamchat.services.background_scheduler import BackgroundScheduler


@pytest.mark.asyncio
async def test_start_is_skipped_in_test_environment():
    scheduler = BackgroundScheduler(rate_limiter=AsyncMock(spec=IRateLimiter))
    await scheduler.start()
    assert scheduler.running is False
    await scheduler.stop()


@pytest.mark.asyncio
async def test_cleanup_job_prunes_rate_limiter():
    limiter = AsyncMock(spec=IRateLimiter)
    limiter.cleanup.return_value = 3
    scheduler = BackgroundScheduler(rate_limiter=limiter)

    await scheduler._run_rate_limit_cleanup()

    limiter.cleanup.assert_awaited_once()


@pytest.mark.asyncio
async def test_cleanup_job_swallows_failures():
    limiter = AsyncMock(spec=IRateLimiter)
    limiter.cleanup.side_effect = RuntimeError("boom")
    scheduler = BackgroundScheduler(rate_limiter=limiter)

    # Must not raise; APScheduler would otherwise log and drop the run
    await scheduler._run_rate_limit_cleanup()
