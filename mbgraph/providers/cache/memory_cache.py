"""In-process response cache backed by ``cachetools.TLRUCache``.

Each entry carries its own lifetime: the ``ttl`` passed to :meth:`set`, or
the provider's default when the caller gives none.  This is what lets a
:class:`~mbgraph.providers.cache.gates.CacheProviderGate` keep search
results briefly while lookups live longer in the same store.
"""

from __future__ import annotations

import time
from typing import Any, Callable, NamedTuple

import structlog
from cachetools import TLRUCache

from mbgraph.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class _Entry(NamedTuple):
    value: Any
    ttl: float | None


class MemoryCacheProvider(ICacheProvider):
    """Bounded in-memory cache with per-entry expiry.

    Parameters
    ----------
    max_size:
        Entry count beyond which the least-recently-used entry is evicted.
    ttl:
        Lifetime in seconds for entries stored without an explicit ``ttl``.
    timer:
        Clock used for expiry, ``time.monotonic`` by default.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: float = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = ttl
        self._cache: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=max_size,
            ttu=self._expires_at,
            timer=timer,
        )

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def _expires_at(self, key: str, entry: _Entry, now: float) -> float:
        lifetime = self._default_ttl if entry.ttl is None else entry.ttl
        return now + lifetime

    async def get(self, key: str) -> Any | None:
        """The live value stored under *key*, or ``None``."""
        entry = self._cache.get(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return entry.value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key* for *ttl* seconds (the default when ``None``).

        A non-positive *ttl* stores nothing.
        """
        self._cache[key] = _Entry(value, ttl)
        logger.debug("cache_set", key=key, ttl=self._default_ttl if ttl is None else ttl)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        return key in self._cache
