"""Bundled cache gates.

``passthrough_gate`` is the default for every operation family and simply
performs the fetch.  ``CacheProviderGate`` turns any ICacheProvider into a
memoizing gate keyed by request URI.
"""

from __future__ import annotations

from typing import Any

import structlog

from mbgraph.interfaces.cache_gate import Producer
from mbgraph.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


async def passthrough_gate(uri: str, force: bool, producer: Producer) -> Any:
    """Always perform the real fetch."""
    return await producer()


class CacheProviderGate:
    """Gate that stores parsed responses in an :class:`ICacheProvider`.

    A cached value is returned unless ``force`` is set.  Failed fetches are
    never stored; the exception propagates to the caller unchanged.
    ``ttl`` is passed with every store; ``None`` keeps the provider default.
    """

    def __init__(self, cache: ICacheProvider, ttl: float | None = None) -> None:
        self._cache = cache
        self._ttl = ttl

    async def __call__(self, uri: str, force: bool, producer: Producer) -> Any:
        if not force:
            cached = await self._cache.get(uri)
            if cached is not None:
                logger.debug("cache_gate_hit", uri=uri)
                return cached

        result = await producer()
        await self._cache.set(uri, result, ttl=self._ttl)
        return result
