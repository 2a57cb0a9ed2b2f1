"""Cache provider and cache gate implementations."""

from mbgraph.providers.cache.gates import CacheProviderGate, passthrough_gate
from mbgraph.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["CacheProviderGate", "MemoryCacheProvider", "passthrough_gate"]
