"""mbgraph entity model: resource kinds, value entities and their base classes.

Resource kinds are looked up and browsed through
:class:`~mbgraph.providers.musicbrainz.client.MusicBrainzClient`; this
package only knows how to build them from a parsed response tree.

    - base.py: Entity / Resource / Capability base classes
    - capabilities.py: linked-entity parsers and the mixins composing them
    - entities.py: the seven resource kinds
    - values.py: Medium, Track, credits, relations, LifeSpan
    - tree.py: helpers for reading the parsed response tree
"""

from __future__ import annotations

from mbgraph.models.base import Capability, Entity, Resource
from mbgraph.models.entities import (
    Artist,
    Disc,
    Label,
    Recording,
    Release,
    ReleaseGroup,
    Work,
)
from mbgraph.models.values import (
    ArtistRel,
    LabelInfo,
    LifeSpan,
    Medium,
    NameCredit,
    Track,
    WorkRel,
)

__all__ = [
    "Artist",
    "ArtistRel",
    "Capability",
    "Disc",
    "Entity",
    "Label",
    "LabelInfo",
    "LifeSpan",
    "Medium",
    "NameCredit",
    "Recording",
    "Release",
    "ReleaseGroup",
    "Resource",
    "Track",
    "Work",
    "WorkRel",
]
