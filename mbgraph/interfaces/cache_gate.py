"""Cache gate contract.

A gate sits in front of every network operation.  It receives the fully
built request URI, the caller's ``force`` flag and a zero-argument
coroutine factory that performs the real fetch, and decides whether to run
the fetch or answer from somewhere else.

The client keeps one gate per operation family (lookup, browse, search).
Nothing above the gate may assume that caching actually happens: the
default gate always fetches.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

Producer = Callable[[], Awaitable[Any]]


class CacheGate(Protocol):
    """Async callable deciding between a real fetch and a stored result."""

    async def __call__(self, uri: str, force: bool, producer: Producer) -> Any:
        ...
