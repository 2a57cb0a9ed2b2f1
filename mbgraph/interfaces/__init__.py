"""Public interface definitions for pluggable collaborators.

The client never talks to a concrete cache directly.  It calls a
:class:`CacheGate`, and the bundled gates in ``mbgraph.providers.cache``
delegate storage to any :class:`ICacheProvider`.  Callers can swap either
half without touching the request pipeline.

    Interface        ->  Concrete implementations (in mbgraph/providers/)
    -----------------------------------------------------------------
    CacheGate        ->  passthrough_gate, CacheProviderGate
    ICacheProvider   ->  MemoryCacheProvider
"""

from mbgraph.interfaces.cache_gate import CacheGate, Producer
from mbgraph.interfaces.cache_provider import ICacheProvider

__all__ = [
    "CacheGate",
    "ICacheProvider",
    "Producer",
]
