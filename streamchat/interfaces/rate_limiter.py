"""
Rate limiter interface.

The check contract stays the same whether the counters live in process
memory or in a shared counter service.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class RateLimitResult(BaseModel):
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int = Field(..., ge=0)
    reset_in: int = Field(..., ge=0, description="Seconds until the window resets")


class IRateLimiter(ABC):
    """Abstract interface for per-key request counters."""

    @abstractmethod
    async def check(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed."""
        pass

    @abstractmethod
    async def cleanup(self) -> int:
        """Drop expired windows. Returns the number of entries removed."""
        pass
