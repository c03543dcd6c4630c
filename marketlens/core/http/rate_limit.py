"""Token bucket rate limiter."""

import asyncio
import time
from collections.abc import Awaitable, Callable

from loguru import logger


class TokenBucket:
    """Allow ``capacity`` requests per ``period`` seconds, refilling continuously.

    ``clock`` and ``sleep`` are injectable so tests do not wait on wall time.
    """

    def __init__(
        self,
        capacity: int,
        period: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if period <= 0:
            raise ValueError("period must be positive")
        self.capacity = capacity
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._updated = clock()
        self._lock = asyncio.Lock()

    @classmethod
    def per_minute(cls, requests: int, **kwargs) -> "TokenBucket":
        return cls(capacity=requests, period=60.0, **kwargs)

    @property
    def rate(self) -> float:
        """Tokens added per second."""
        return self.capacity / self.period

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(float(self.capacity), self._tokens + elapsed * self.rate)
        self._updated = now

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                wait = (1 - self._tokens) / self.rate
                logger.debug(f"Rate limit reached, waiting {wait:.3f} seconds")
                await self._sleep(wait)
                self._refill()
            self._tokens -= 1
