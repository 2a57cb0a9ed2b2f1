"""mbgraph: async MusicBrainz web-service client with partially loaded entity graphs.

Typical use::

    from mbgraph import Artist, MusicBrainzClient

    async with MusicBrainzClient() as client:
        artist = Artist("5b11f4ce-a62d-471e-81fc-a69a8278c7da")
        await artist.load(client, ["releases"])
"""

from __future__ import annotations

# Defined before the submodule imports: config.settings reads it.
__version__ = "0.1.0"

from mbgraph.config import Settings, load_config  # noqa: E402
from mbgraph.models import (  # noqa: E402
    Artist,
    ArtistRel,
    Disc,
    Label,
    LabelInfo,
    LifeSpan,
    Medium,
    NameCredit,
    Recording,
    Release,
    ReleaseGroup,
    Track,
    Work,
    WorkRel,
)
from mbgraph.providers.cache import CacheProviderGate, MemoryCacheProvider, passthrough_gate  # noqa: E402
from mbgraph.providers.musicbrainz import MusicBrainzClient, RateLimiter  # noqa: E402
from mbgraph.utils.errors import (  # noqa: E402
    ConfigurationError,
    MalformedResponseError,
    MBGraphError,
    ServiceBusyError,
    ServiceError,
    TransportError,
)

__all__ = [
    "Artist",
    "ArtistRel",
    "CacheProviderGate",
    "ConfigurationError",
    "Disc",
    "Label",
    "LabelInfo",
    "LifeSpan",
    "MBGraphError",
    "MalformedResponseError",
    "Medium",
    "MemoryCacheProvider",
    "MusicBrainzClient",
    "NameCredit",
    "RateLimiter",
    "Recording",
    "Release",
    "ReleaseGroup",
    "ServiceBusyError",
    "ServiceError",
    "Settings",
    "Track",
    "TransportError",
    "Work",
    "WorkRel",
    "__version__",
    "load_config",
    "passthrough_gate",
]
