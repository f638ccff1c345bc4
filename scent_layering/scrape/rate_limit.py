"""Minimum-interval gate for outbound calls to the scraped source."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from scent_layering.core.logging import get_logger

LOGGER = get_logger(__name__)


class RateLimiter:
    """Serialise callers so consecutive acquisitions are ``min_interval`` seconds apart.

    One instance is shared by every caller of an adapter; the last-request
    timestamp is updated under the lock.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                remaining = self._min_interval - (self._clock() - self._last_request)
                if remaining > 0:
                    LOGGER.debug("scrape.rate_limited", wait_seconds=round(remaining, 3))
                    await self._sleep(remaining)
            self._last_request = self._clock()
