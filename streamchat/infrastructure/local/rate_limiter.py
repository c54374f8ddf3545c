"""
In-memory fixed-window rate limiter.

Counters live in process memory, so limits are per worker process.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from streamchat.interfaces.rate_limiter import IRateLimiter, RateLimitResult


@dataclass
class _Window:
    count: int
    reset_at: float


class InMemoryRateLimiter(IRateLimiter):
    """Fixed-window counter keyed by caller."""

    def __init__(
        self,
        max_requests: int = 20,
        window_seconds: int = 60,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._windows: dict[str, _Window] = {}
        self._lock = asyncio.Lock()

    async def check(self, key: str) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            window = self._windows.get(key)

            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self._window_seconds)
                return RateLimitResult(
                    allowed=True,
                    remaining=max(self._max_requests - 1, 0),
                    reset_in=self._window_seconds,
                )

            reset_in = max(math.ceil(window.reset_at - now), 0)
            if window.count >= self._max_requests:
                return RateLimitResult(allowed=False, remaining=0, reset_in=reset_in)

            window.count += 1
            return RateLimitResult(
                allowed=True,
                remaining=self._max_requests - window.count,
                reset_in=reset_in,
            )

    async def cleanup(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [key for key, window in self._windows.items() if now > window.reset_at]
            for key in expired:
                del self._windows[key]
            return len(expired)
