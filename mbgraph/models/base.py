"""Entity and Resource base classes.

An :class:`Entity` is a record that knows which of its attributes make up
its serialized form (its *declared fields*).  A :class:`Resource` is an
entity with a MusicBrainz identifier that can be fetched on its own, and
that tracks which linked-entity categories have been merged into it.

Resource kinds are assembled from capability mixins (see
:mod:`mbgraph.models.capabilities`).  Each mixin carries one
:class:`Capability` object.  When a subclass is created,
``__init_subclass__`` walks the MRO once and builds three class-level
tables:

- ``_declared_fields``: own fields of base classes, then capability fields
  in mixin order, then the class's own ``fields``.  A name declared twice
  raises ``TypeError``.
- ``_capabilities``: the composed capability objects, in mixin order.
- ``_parsers``: category name -> capability.  Several names may route to
  one capability (``artists`` / ``artist-credits``), but two different
  capabilities claiming one name raises ``TypeError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterable, Sequence

from pydantic import BaseModel

if TYPE_CHECKING:
    from mbgraph.providers.musicbrainz.client import MusicBrainzClient


class Capability:
    """A linked-entity loader composed into resource kinds.

    Subclasses set the class attributes and implement :meth:`parse`.

    Attributes
    ----------
    categories:
        Category names routed to this capability.  The first one is the
        capability's primary name.
    fields:
        Field names contributed to the host's declared fields.  Each starts
        out as an empty list.
    containers:
        Response keys that hold this capability's data.  Used to detect
        embedded data in nested fragments.
    """

    categories: ClassVar[tuple[str, ...]] = ()
    fields: ClassVar[tuple[str, ...]] = ()
    containers: ClassVar[tuple[str, ...]] = ()

    @property
    def name(self) -> str:
        return self.categories[0]

    def defaults(self) -> dict[str, Any]:
        return {field: [] for field in self.fields}

    def present_in(self, fragment: Any) -> bool:
        return isinstance(fragment, dict) and any(key in fragment for key in self.containers)

    def parse(self, host: Resource, fragment: dict[str, Any]) -> None:
        """Populate *host*'s fields from *fragment*.  Absent data is not an error."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {'/'.join(self.categories)}>"


class Entity:
    """A self-describing record.

    Subclasses list their own scalar fields in ``fields``; declared fields
    accumulate down the class hierarchy and across composed capabilities.
    Fields holding ``None`` count as unset.
    """

    fields: ClassVar[tuple[str, ...]] = ()
    field_defaults: ClassVar[dict[str, Callable[[], Any]]] = {}

    _declared_fields: ClassVar[tuple[str, ...]] = ()
    _capabilities: ClassVar[tuple[Capability, ...]] = ()
    _parsers: ClassVar[dict[str, Capability]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        capabilities: list[Capability] = []
        for klass in cls.__mro__:
            capability = klass.__dict__.get("capability")
            if isinstance(capability, Capability) and capability not in capabilities:
                capabilities.append(capability)

        declared: list[str] = []

        def declare(name: str) -> None:
            if name in declared:
                raise TypeError(f"{cls.__name__}: field {name!r} is declared twice")
            declared.append(name)

        for klass in reversed(cls.__mro__[1:]):
            for name in klass.__dict__.get("fields", ()):
                if name not in declared:
                    declare(name)
        for capability in capabilities:
            for name in capability.fields:
                declare(name)
        for name in cls.__dict__.get("fields", ()):
            declare(name)

        parsers: dict[str, Capability] = {}
        for capability in capabilities:
            for category in capability.categories:
                claimed = parsers.get(category)
                if claimed is not None and claimed is not capability:
                    raise TypeError(
                        f"{cls.__name__}: category {category!r} is claimed by "
                        f"{claimed!r} and {capability!r}"
                    )
                parsers[category] = capability

        cls._declared_fields = tuple(declared)
        cls._capabilities = tuple(capabilities)
        cls._parsers = parsers

    def __init__(self) -> None:
        for name in self._declared_fields:
            setattr(self, name, None)
        for capability in self._capabilities:
            for name, value in capability.defaults().items():
                setattr(self, name, value)
        for klass in reversed(type(self).__mro__):
            for name, factory in klass.__dict__.get("field_defaults", {}).items():
                setattr(self, name, factory())

    @classmethod
    def declared_fields(cls) -> tuple[str, ...]:
        return cls._declared_fields

    def set_property(self, name: str, value: Any) -> bool:
        """Set declared field *name* unless *value* is ``None``.

        Returns whether the field was written, so parsers can copy optional
        response values without defaulting missing ones.
        """
        if name not in self._declared_fields:
            raise AttributeError(f"{type(self).__name__} has no declared field {name!r}")
        if value is None:
            return False
        setattr(self, name, value)
        return True

    def data(self) -> dict[str, Any]:
        """Plain nested structure of the declared fields that are set."""
        result: dict[str, Any] = {}
        for name in self._declared_fields:
            value = getattr(self, name, None)
            if value is None:
                continue
            result[name] = _plain(value)
        return result

    def is_complete(self) -> bool:
        """False if any set declared field holds an empty string, zero or False.

        Lists and mappings never make an entity incomplete; an artist with
        no releases is still a complete artist.  Advisory only.
        """
        for name in self._declared_fields:
            value = getattr(self, name, None)
            if isinstance(value, (str, int, float, bool)) and not value:
                return False
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.data()!r}>"


def _plain(value: Any) -> Any:
    if isinstance(value, Entity):
        return value.data()
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


class Resource(Entity):
    """An entity fetchable by MBID that tracks partial loading.

    ``loaded_linked_entities`` is always a subset of ``linked_entities()``.
    A resource is loaded for a set of categories when it has been fetched
    at least once and every requested category has been merged in.
    """

    fields = ("id",)

    #: Web-service path segment, e.g. ``"release-group"``.
    entity_path: ClassVar[str] = ""
    #: Key of the resource element inside a lookup response.
    envelope: ClassVar[str] = ""

    _kinds: ClassVar[dict[str, type[Resource]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__dict__.get("entity_path"):
            Resource._kinds[cls.entity_path] = cls

    @staticmethod
    def kind(entity_path: str) -> type[Resource]:
        """The resource class registered for *entity_path* (``"release"``, ...)."""
        return Resource._kinds[entity_path]

    def __init__(self, mbid: str | None = None) -> None:
        super().__init__()
        self.id = mbid
        self.search_score: int | None = None
        self._loaded = False
        self._loaded_linked_entities: list[str] = []

    # ------------------------------------------------------------------
    # Loaded-state bookkeeping
    # ------------------------------------------------------------------

    @classmethod
    def linked_entities(cls) -> tuple[str, ...]:
        """Every category name this kind accepts, in composition order."""
        return tuple(cls._parsers)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def loaded_linked_entities(self) -> tuple[str, ...]:
        return tuple(self._loaded_linked_entities)

    def loaded(self, categories: Iterable[str] | None = None) -> bool:
        """Whether this resource was fetched and holds every category in *categories*.

        ``None`` means every category the kind declares.
        """
        if not self._loaded:
            return False
        if categories is None:
            categories = self.linked_entities()
        return all(category in self._loaded_linked_entities for category in categories)

    def mark_fetched(self) -> None:
        self._loaded = True

    def _mark_loaded(self, categories: Iterable[str]) -> None:
        for category in categories:
            if category not in self._loaded_linked_entities:
                self._loaded_linked_entities.append(category)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def from_tree(cls, node: dict[str, Any]) -> Resource:
        """Build an instance holding the scalar fields present in *node*."""
        resource = cls(_node_id(node))
        resource._read_scalars(node)
        return resource

    def _read_scalars(self, node: dict[str, Any]) -> None:
        """Copy this kind's scalar fields out of *node*."""

    def read_data(self, categories: Sequence[str], fragment: dict[str, Any]) -> None:
        """Run the parser of every requested category and mark it loaded.

        Categories this kind does not declare are ignored.  A capability
        reachable under several names runs once and marks all of them.
        """
        done: list[Capability] = []
        for category in categories:
            capability = self._parsers.get(category)
            if capability is None or capability in done:
                continue
            done.append(capability)
            capability.parse(self, fragment)
            self._mark_loaded(capability.categories)

    def read_embedded(self, fragment: dict[str, Any]) -> None:
        """Parse whatever linked data *fragment* happens to carry.

        Used for nested snapshots: nothing is marked loaded.
        """
        for capability in self._capabilities:
            if capability.present_in(fragment):
                capability.parse(self, fragment)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def lookup_includes(cls, categories: Sequence[str]) -> list[str]:
        """The ``inc`` list sent when looking this kind up for *categories*."""
        return list(categories)

    @classmethod
    def lookup_categories(cls, categories: Sequence[str]) -> list[str]:
        """The categories parsed out of a lookup response for *categories*."""
        return list(categories)

    def _merge_from(self, other: Resource) -> None:
        """Replace this resource's state with *other*'s, field by field.

        Linked-entity lists are replaced wholesale, not appended to.
        """
        for name in self._declared_fields:
            setattr(self, name, getattr(other, name))
        self._loaded = other._loaded
        self._loaded_linked_entities = list(other._loaded_linked_entities)

    async def load(
        self,
        client: MusicBrainzClient,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
    ) -> Resource:
        """Fetch this resource with *linked_entities* unless already loaded.

        On success every declared field is overwritten with the fresh
        values.  On failure the exception propagates and ``self`` is left
        untouched.  Overlapping loads on one instance are not coordinated;
        the last one to finish wins.
        """
        requested = list(linked_entities or [])
        if not force and self.loaded(requested):
            return self

        fresh = await client.lookup_entity(type(self), self.id, requested, force=force)
        self._merge_from(fresh)
        return self

    async def update(self, client: MusicBrainzClient) -> Resource:
        """Re-fetch exactly the categories loaded so far."""
        return await self.load(client, list(self._loaded_linked_entities), force=True)


def _node_id(node: Any) -> str | None:
    if isinstance(node, dict):
        attributes = node.get("@")
        if isinstance(attributes, dict):
            return attributes.get("id")
        value = node.get("id")
        return value if isinstance(value, str) else None
    return None
