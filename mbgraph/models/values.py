"""Value entities: records that live inside resources and are never fetched on their own.

A Medium owns its discs and tracks, a Track owns at most one Recording
snapshot, and relation records own a denormalized copy of the related
artist or work.  None of these share instances with the resource that was
looked up; they are copies of whatever the enclosing response contained.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from mbgraph.models.base import Entity

if TYPE_CHECKING:
    from mbgraph.models.entities import Artist, Disc, Label, Recording, Work


class LifeSpan(BaseModel):
    """Begin/end dates of an artist or label, as partial ISO dates ("1978", "1978-04")."""

    model_config = ConfigDict(frozen=True)

    begin: str | None = None
    end: str | None = None
    ended: bool | None = None


class Medium(Entity):
    """One physical or digital medium (disc, side, file set) of a release."""

    fields = ("title", "position", "format", "discs", "tracks")
    field_defaults = {"discs": list, "tracks": list}

    title: str | None
    position: int | None
    format: str | None
    discs: list[Disc]
    tracks: list[Track]

    def get_track_by_position(self, position: int | None) -> Track | None:
        if not position:
            return None
        for track in self.tracks:
            if track.position == position:
                return track
        return None


class Track(Entity):
    fields = ("position", "number", "title", "length", "recording")

    position: int | None
    number: str | None
    title: str | None
    length: int | None
    recording: Recording | None


class LabelInfo(Entity):
    fields = ("catalog_number", "label")

    catalog_number: str | None
    label: Label | None


class NameCredit(Entity):
    """One (artist, join phrase) pair of an artist credit.

    ``name`` is the credited name when it differs from the artist's own.
    """

    fields = ("artist", "name", "joinphrase")
    field_defaults = {"joinphrase": str}

    artist: Artist | None
    name: str | None
    joinphrase: str

    def is_complete(self) -> bool:
        # An empty join phrase is the normal case, not missing data.
        return self.artist is not None


class ArtistRel(Entity):
    fields = ("type", "attributes", "artist")
    field_defaults = {"attributes": list}

    type: str | None
    attributes: list[str]
    artist: Artist | None


class WorkRel(Entity):
    fields = ("type", "attributes", "work")
    field_defaults = {"attributes": list}

    type: str | None
    attributes: list[str]
    work: Work | None


def read_life_span(node: Any) -> LifeSpan | None:
    """Life span from a ``life-span`` element, or ``None`` when absent."""
    if not isinstance(node, dict) or "life-span" not in node:
        return None
    span = node["life-span"]
    if not isinstance(span, dict):
        return LifeSpan()
    ended = span.get("ended")
    return LifeSpan(
        begin=span.get("begin") if isinstance(span.get("begin"), str) else None,
        end=span.get("end") if isinstance(span.get("end"), str) else None,
        ended=ended == "true" if isinstance(ended, str) else None,
    )
