"""Token-refill rate limiter for outbound web-service requests.

MusicBrainz asks anonymous clients to stay at or below one request per
second.  The limiter holds up to ``requests`` permits and refills them
continuously at ``requests / interval`` per second, so a full bucket allows
a short burst and then settles to the configured rate.

Waiters queue on a single ``asyncio.Lock``.  The lock wakes waiters in
arrival order, which gives FIFO grants and rules out two callers taking the
same permit.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from mbgraph.utils.errors import ConfigurationError
from mbgraph.utils.logging import get_logger

_logger = get_logger(__name__)

_EPSILON = 1e-9


@dataclass(frozen=True)
class RatePolicy:
    """``requests`` permits per ``interval_ms`` milliseconds."""

    requests: int = 1
    interval_ms: int = 1000

    def __post_init__(self) -> None:
        if self.requests <= 0 or self.interval_ms <= 0:
            raise ConfigurationError(
                message=(
                    "Rate limit must be positive, got "
                    f"{self.requests} requests per {self.interval_ms}ms"
                ),
            )

    @property
    def permits_per_second(self) -> float:
        return self.requests * 1000.0 / self.interval_ms


class RateLimiter:
    """Async token bucket shared by every request a client sends.

    Parameters
    ----------
    requests, interval_ms:
        Initial policy.  Defaults to 1 permit per 1000ms.
    clock, sleep:
        Time source and sleeper.  Injected so tests can drive time by hand.
    """

    def __init__(
        self,
        requests: int = 1,
        interval_ms: int = 1000,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._policy = RatePolicy(requests, interval_ms)
        self._clock = clock
        self._sleep = sleep
        self._tokens: float = float(requests)
        self._updated: float = clock()
        self._lock = asyncio.Lock()

    @property
    def policy(self) -> RatePolicy:
        return self._policy

    def configure(self, requests: int = 1, interval_ms: int = 1000) -> None:
        """Replace the policy for every acquisition that starts from now on.

        A caller already waiting inside :meth:`acquire` finishes under the
        policy it started with.
        """
        policy = RatePolicy(requests, interval_ms)
        self._refill(self._policy)
        self._tokens = min(self._tokens, float(policy.requests))
        self._policy = policy
        _logger.debug(
            "rate_limit_configured",
            requests=policy.requests,
            interval_ms=policy.interval_ms,
        )

    async def acquire(self, n: int = 1) -> None:
        """Suspend until *n* permits are available, then take them."""
        policy = self._policy
        if n > policy.requests:
            raise ValueError(
                f"Cannot acquire {n} permits from a bucket of {policy.requests}"
            )

        async with self._lock:
            while True:
                self._refill(policy)
                if self._tokens + _EPSILON >= n:
                    self._tokens -= n
                    return
                wait = (n - self._tokens) / policy.permits_per_second
                await self._sleep(wait)

    def _refill(self, policy: RatePolicy) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._updated = now
        self._tokens = min(
            float(policy.requests),
            self._tokens + elapsed * policy.permits_per_second,
        )
