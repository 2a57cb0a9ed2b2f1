"""MusicBrainz resource kinds.

Each kind is a :class:`~mbgraph.models.base.Resource` plus the capability
mixins it composes and its own scalar fields:

    Kind          Capabilities                                     Scalar fields
    ----------------------------------------------------------------------------
    Disc          releases                                          sectors
    Release       release-groups, labels, recordings, artists       title, status, ...
    Recording     releases, artists, artist-rels, work-rels         title, length, producer, vocal
    ReleaseGroup  releases, artists                                 type, title, primary_type, ...
    Artist        releases, release-groups, recordings, aliases,
                  isnis, works                                      type, name, sort_name, ...
    Label         releases                                          type, name, sort_name, ...
    Work          --                                                type, title

``from_tree`` copies only the scalar fields the response actually carried;
anything missing stays ``None``.
"""

from __future__ import annotations

from typing import Any, Sequence

from mbgraph.models.base import Resource
from mbgraph.models.capabilities import (
    AliasesLinked,
    ArtistCreditsLinked,
    ArtistRelsLinked,
    IsnisLinked,
    LabelsLinked,
    RecordingsLinked,
    ReleaseGroupsLinked,
    ReleasesLinked,
    WorkRelsLinked,
    WorksLinked,
    relation_lists,
)
from mbgraph.models.tree import as_list, attr, child_int, child_text, list_items, text_of
from mbgraph.models.values import read_life_span


class Disc(ReleasesLinked, Resource):
    """A CD table of contents identified by its disc ID."""

    entity_path = "discid"
    envelope = "disc"
    fields = ("sectors",)

    def _read_scalars(self, node: dict[str, Any]) -> None:
        self.set_property("sectors", child_int(node, "sectors"))

    @classmethod
    def lookup_includes(cls, categories: Sequence[str]) -> list[str]:
        return ["recordings"]

    @classmethod
    def lookup_categories(cls, categories: Sequence[str]) -> list[str]:
        return ["releases"]


class Release(ReleaseGroupsLinked, LabelsLinked, RecordingsLinked, ArtistCreditsLinked, Resource):
    entity_path = "release"
    envelope = "release"
    fields = (
        "title",
        "status",
        "packaging",
        "quality",
        "language",
        "script",
        "date",
        "country",
        "barcode",
        "asin",
    )

    def _read_scalars(self, node: dict[str, Any]) -> None:
        for name in ("title", "status", "packaging", "quality", "date", "country", "barcode", "asin"):
            self.set_property(name, child_text(node, name))
        representation = node.get("text-representation")
        if isinstance(representation, dict):
            self.set_property("language", child_text(representation, "language"))
            self.set_property("script", child_text(representation, "script"))


class Recording(ReleasesLinked, ArtistCreditsLinked, ArtistRelsLinked, WorkRelsLinked, Resource):
    """A distinct audio recording.

    ``producer`` and ``vocal`` hold the artist of the matching artist
    relation whenever the payload carried relations, independent of
    whether ``artist-rels`` was requested.  With several relations of one
    type the last one wins.
    """

    entity_path = "recording"
    envelope = "recording"
    fields = ("title", "length", "producer", "vocal")

    relation_slots = ("producer", "vocal")

    def _read_scalars(self, node: dict[str, Any]) -> None:
        self.set_property("title", child_text(node, "title"))
        self.set_property("length", child_int(node, "length"))

        for relation_list in relation_lists(node, "artist"):
            for relation in list_items(relation_list, "relation"):
                if not isinstance(relation, dict) or not isinstance(relation.get("artist"), dict):
                    continue
                slot = attr(relation, "type")
                if slot in self.relation_slots:
                    self.set_property(slot, Artist.from_tree(relation["artist"]))


class ReleaseGroup(ReleasesLinked, ArtistCreditsLinked, Resource):
    entity_path = "release-group"
    envelope = "release-group"
    fields = ("type", "title", "primary_type", "secondary_types", "first_release_date")
    field_defaults = {"secondary_types": list}

    def _read_scalars(self, node: dict[str, Any]) -> None:
        self.set_property("type", attr(node, "type"))
        self.set_property("title", child_text(node, "title"))
        self.set_property("first_release_date", child_text(node, "first-release-date"))
        self.set_property("primary_type", child_text(node, "primary-type"))

        secondary = node.get("secondary-type-list")
        if isinstance(secondary, dict):
            types = [text_of(value) for value in as_list(secondary.get("secondary-type"))]
            self.set_property("secondary_types", [value for value in types if value])


class Artist(
    ReleasesLinked,
    ReleaseGroupsLinked,
    RecordingsLinked,
    AliasesLinked,
    IsnisLinked,
    WorksLinked,
    Resource,
):
    entity_path = "artist"
    envelope = "artist"
    fields = ("type", "name", "sort_name", "life_span", "ipi", "country", "gender")

    def _read_scalars(self, node: dict[str, Any]) -> None:
        self.set_property("type", attr(node, "type"))
        self.set_property("name", child_text(node, "name"))
        self.set_property("sort_name", child_text(node, "sort-name"))
        self.set_property("ipi", child_text(node, "ipi"))
        self.set_property("country", child_text(node, "country"))
        self.set_property("gender", child_text(node, "gender"))
        self.set_property("life_span", read_life_span(node))

    @classmethod
    def lookup_categories(cls, categories: Sequence[str]) -> list[str]:
        # ISNIs are part of every artist lookup response.
        requested = list(categories)
        if "isnis" not in requested:
            requested.append("isnis")
        return requested

    @classmethod
    def lookup_includes(cls, categories: Sequence[str]) -> list[str]:
        return [category for category in categories if category != "isnis"]


class Label(ReleasesLinked, Resource):
    entity_path = "label"
    envelope = "label"
    fields = ("type", "name", "sort_name", "label_code", "country", "life_span")

    def _read_scalars(self, node: dict[str, Any]) -> None:
        self.set_property("type", attr(node, "type"))
        self.set_property("name", child_text(node, "name"))
        self.set_property("sort_name", child_text(node, "sort-name"))
        self.set_property("label_code", child_text(node, "label-code"))
        self.set_property("country", child_text(node, "country"))
        self.set_property("life_span", read_life_span(node))


class Work(Resource):
    entity_path = "work"
    envelope = "work"
    fields = ("type", "title")

    def _read_scalars(self, node: dict[str, Any]) -> None:
        self.set_property("type", attr(node, "type"))
        self.set_property("title", child_text(node, "title"))


__all__ = [
    "Artist",
    "Disc",
    "Label",
    "Recording",
    "Release",
    "ReleaseGroup",
    "Work",
]
