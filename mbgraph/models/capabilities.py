"""Linked-entity capabilities and the mixins that compose them.

Each capability knows one slice of a MusicBrainz response (the release
list, the artist credit, the relation lists, ...).  A resource kind is
declared by listing the mixins it composes::

    class ReleaseGroup(ReleasesLinked, ArtistCreditsLinked, Resource):
        ...

Every mixin carries a single :class:`~mbgraph.models.base.Capability`
instance plus the helper methods that only make sense on hosts holding that
slice (``artist_credits_string()``, ``get_medium_by_disc_id()``, ...).

Parsers build child entities from the payload they were given and never
fetch anything.  Nested resources are snapshots: they get whatever the
payload carried for them (recursively, via ``read_embedded``) and stay
unloaded.
"""

from __future__ import annotations

from typing import Any

from mbgraph.models.base import Capability, Resource
from mbgraph.models.tree import as_list, attr, child_int, child_text, list_items, text_of
from mbgraph.models.values import ArtistRel, LabelInfo, Medium, NameCredit, Track, WorkRel


def _snapshot(entity_path: str, node: Any) -> Resource:
    resource = Resource.kind(entity_path).from_tree(node)
    resource.read_embedded(node)
    return resource


def parse_medium(node: dict[str, Any]) -> Medium:
    """Build a Medium with its discs and tracks from a ``medium`` element."""
    medium = Medium()
    medium.set_property("title", child_text(node, "title"))
    medium.set_property("position", child_int(node, "position"))
    medium.set_property("format", child_text(node, "format"))

    for disc_node in list_items(node.get("disc-list"), "disc"):
        if isinstance(disc_node, dict):
            medium.discs.append(_snapshot("discid", disc_node))

    for track_node in list_items(node.get("track-list"), "track"):
        if not isinstance(track_node, dict):
            continue
        track = Track()
        track.set_property("position", child_int(track_node, "position"))
        track.set_property("number", child_text(track_node, "number"))
        track.set_property("title", child_text(track_node, "title"))
        track.set_property("length", child_int(track_node, "length"))
        if isinstance(track_node.get("recording"), dict):
            track.recording = _snapshot("recording", track_node["recording"])
        medium.tracks.append(track)

    return medium


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

class AliasesCapability(Capability):
    categories = ("aliases",)
    fields = ("aliases",)
    containers = ("alias-list",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        for alias in list_items(fragment.get("alias-list"), "alias"):
            name = text_of(alias)
            if name is not None:
                host.aliases.append(name)


class IsniCapability(Capability):
    categories = ("isnis",)
    fields = ("isnis",)
    containers = ("isni-list",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        # isni-list has no count attribute; the value's shape decides.
        for isni in list_items(fragment.get("isni-list"), "isni"):
            value = text_of(isni)
            if value is not None:
                host.isnis.append(value)


class ReleasesCapability(Capability):
    categories = ("releases",)
    fields = ("releases",)
    containers = ("release-list",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        for node in list_items(fragment.get("release-list"), "release"):
            if isinstance(node, dict):
                host.releases.append(_snapshot("release", node))


class ReleaseGroupsCapability(Capability):
    categories = ("release-groups",)
    fields = ("release_groups",)
    containers = ("release-group", "release-group-list")

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        # A release carries its single release group directly; artists
        # carry a release-group-list.
        if "release-group" in fragment:
            nodes = as_list(fragment["release-group"])
        else:
            nodes = list_items(fragment.get("release-group-list"), "release-group")

        for node in nodes:
            if isinstance(node, dict):
                host.release_groups.append(_snapshot("release-group", node))


class LabelInfoCapability(Capability):
    categories = ("labels",)
    fields = ("label_info",)
    containers = ("label-info-list",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        for node in list_items(fragment.get("label-info-list"), "label-info"):
            if not isinstance(node, dict):
                continue
            info = LabelInfo()
            info.set_property("catalog_number", child_text(node, "catalog-number"))
            if isinstance(node.get("label"), dict):
                info.label = _snapshot("label", node["label"])
            host.label_info.append(info)


class RecordingsCapability(Capability):
    """Mediums (with discs and tracks) and flat recording lists.

    Disc IDs only ever arrive inside mediums, so ``discids`` shares this
    parser.
    """

    categories = ("recordings", "discids")
    fields = ("mediums", "recordings")
    containers = ("medium-list", "recording-list")

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        for node in list_items(fragment.get("medium-list"), "medium"):
            if isinstance(node, dict):
                host.mediums.append(parse_medium(node))

        for node in list_items(fragment.get("recording-list"), "recording"):
            if isinstance(node, dict):
                host.recordings.append(_snapshot("recording", node))


class ArtistCreditsCapability(Capability):
    categories = ("artists", "artist-credits")
    fields = ("artist_credits",)
    containers = ("artist-credit",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        credit = fragment.get("artist-credit")
        if not isinstance(credit, dict):
            return
        for node in as_list(credit.get("name-credit")):
            if not isinstance(node, dict) or not isinstance(node.get("artist"), dict):
                continue
            name_credit = NameCredit()
            name_credit.artist = _snapshot("artist", node["artist"])
            name_credit.set_property("name", child_text(node, "name"))
            name_credit.set_property("joinphrase", attr(node, "joinphrase"))
            host.artist_credits.append(name_credit)


def relation_lists(fragment: dict[str, Any], target_type: str) -> list[dict[str, Any]]:
    """The relation-list elements of *fragment* whose target-type is *target_type*."""
    return [
        relation_list
        for relation_list in as_list(fragment.get("relation-list"))
        if attr(relation_list, "target-type") == target_type
    ]


def _relation_attributes(relation: dict[str, Any]) -> list[str]:
    container = relation.get("attribute-list")
    if not isinstance(container, dict):
        return []
    return [
        value
        for value in (text_of(item) for item in as_list(container.get("attribute")))
        if value is not None
    ]


class ArtistRelsCapability(Capability):
    categories = ("artist-rels",)
    fields = ("artist_rels",)
    containers = ("relation-list",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        for relation_list in relation_lists(fragment, "artist"):
            for relation in list_items(relation_list, "relation"):
                if not isinstance(relation, dict) or not isinstance(relation.get("artist"), dict):
                    continue
                rel = ArtistRel()
                rel.set_property("type", attr(relation, "type"))
                rel.attributes = _relation_attributes(relation)
                rel.artist = Resource.kind("artist").from_tree(relation["artist"])
                host.artist_rels.append(rel)


class WorkRelsCapability(Capability):
    categories = ("work-rels",)
    fields = ("work_rels",)
    containers = ("relation-list",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        for relation_list in relation_lists(fragment, "work"):
            for relation in list_items(relation_list, "relation"):
                if not isinstance(relation, dict) or not isinstance(relation.get("work"), dict):
                    continue
                rel = WorkRel()
                rel.set_property("type", attr(relation, "type"))
                rel.attributes = _relation_attributes(relation)
                rel.work = Resource.kind("work").from_tree(relation["work"])
                host.work_rels.append(rel)


class WorksCapability(Capability):
    categories = ("works",)
    fields = ("works",)
    containers = ("work-list",)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        for node in list_items(fragment.get("work-list"), "work"):
            if isinstance(node, dict):
                host.works.append(_snapshot("work", node))


# ---------------------------------------------------------------------------
# Mixins
# ---------------------------------------------------------------------------

class AliasesLinked:
    capability = AliasesCapability()


class IsnisLinked:
    capability = IsniCapability()


class ReleasesLinked:
    capability = ReleasesCapability()


class ReleaseGroupsLinked:
    capability = ReleaseGroupsCapability()


class LabelsLinked:
    capability = LabelInfoCapability()


class RecordingsLinked:
    capability = RecordingsCapability()

    mediums: list[Medium]

    def get_medium_by_disc_id(self, disc_id: str | None) -> Medium | None:
        if not disc_id:
            return None
        for medium in self.mediums:
            for disc in medium.discs:
                if disc.id == disc_id:
                    return medium
        return None


class ArtistCreditsLinked:
    capability = ArtistCreditsCapability()

    artist_credits: list[NameCredit]

    def artist_credits_string(self) -> str:
        """Artist names joined by their join phrases, e.g. ``"Moby & Public Enemy"``."""
        return "".join(
            f"{credit.artist.name or ''}{credit.joinphrase}" for credit in self.artist_credits
        )

    def artist_credits_sort_string(self) -> str:
        """Same as :meth:`artist_credits_string` using sort names."""
        return "".join(
            f"{credit.artist.sort_name or ''}{credit.joinphrase}" for credit in self.artist_credits
        )


class ArtistRelsLinked:
    capability = ArtistRelsCapability()

    artist_rels: list[ArtistRel]

    def get_artist_rels_by_type(self, rel_type: str | None) -> list[ArtistRel]:
        if not rel_type:
            return []
        return [rel for rel in self.artist_rels if rel.type == rel_type]


class WorkRelsLinked:
    capability = WorkRelsCapability()

    work_rels: list[WorkRel]

    def get_work_rel_by_type(self, rel_type: str | None) -> WorkRel | None:
        if not rel_type:
            return None
        for rel in self.work_rels:
            if rel.type == rel_type:
                return rel
        return None


class WorksLinked:
    capability = WorksCapability()


__all__ = [
    "AliasesLinked",
    "ArtistCreditsLinked",
    "ArtistRelsLinked",
    "IsnisLinked",
    "LabelsLinked",
    "RecordingsLinked",
    "ReleaseGroupsLinked",
    "ReleasesLinked",
    "WorkRelsLinked",
    "WorksLinked",
    "parse_medium",
    "relation_lists",
]
