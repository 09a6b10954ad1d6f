"""Fixed-window in-memory rate limiter.

State lives in the process, so with several workers the limit is per worker.
Good enough to blunt abuse; not an exact quota.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        """Whole seconds until the window resets (at least 1)."""
        return max(1, int(self.reset_at - now + 0.999))


class InMemoryRateLimiter:
    """Counts requests per identifier inside a fixed window."""

    def __init__(
        self,
        window_seconds: float = 60.0,
        max_requests: int = 10,
        clock: Callable[[], float] = time.monotonic,
        cleanup_probability: float = 0.1,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.clock = clock
        self.cleanup_probability = cleanup_probability
        self._entries: dict[str, tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def check(self, identifier: str) -> RateLimitResult:
        now = self.clock()
        async with self._lock:
            if random.random() < self.cleanup_probability:
                self._cleanup(now)

            count, reset_at = self._entries.get(identifier, (0, 0.0))
            if count == 0 or now > reset_at:
                reset_at = now + self.window_seconds
                self._entries[identifier] = (1, reset_at)
                return RateLimitResult(True, self.max_requests - 1, reset_at)

            if count >= self.max_requests:
                return RateLimitResult(False, 0, reset_at)

            count += 1
            self._entries[identifier] = (count, reset_at)
            return RateLimitResult(True, self.max_requests - count, reset_at)

    async def cleanup(self) -> None:
        async with self._lock:
            self._cleanup(self.clock())

    async def reset(self) -> None:
        async with self._lock:
            self._entries.clear()

    def _cleanup(self, now: float) -> None:
        for key in [k for k, (_, reset_at) in self._entries.items() if now > reset_at]:
            del self._entries[key]
