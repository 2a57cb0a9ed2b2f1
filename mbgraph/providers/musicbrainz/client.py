"""MusicBrainz web-service client.

The client is the explicit context every request runs in: it owns the
service base URI, the rate limiter shared by all of its requests, the
transport, and one cache gate per operation family.  Two clients never
share state unless they are handed the same :class:`RateLimiter`.

Three layers of operations:

- raw ``lookup`` / ``browse`` / ``search`` return the parsed response tree;
- ``lookup_entity`` builds a loaded resource of a given kind (this is what
  :meth:`Resource.load` calls);
- typed helpers (``lookup_artist``, ``search_recordings``, ...) return
  resources, or the raw JSON document when called with ``fmt="json"``.

Usage::

    async with MusicBrainzClient() as client:
        artist = await client.lookup_artist(mbid, ["releases"])
        for release in artist.releases:
            ...
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Sequence, TypeVar

import httpx

from mbgraph.config.settings import Settings
from mbgraph.interfaces.cache_gate import CacheGate
from mbgraph.models.base import Resource
from mbgraph.models.entities import (
    Artist,
    Disc,
    Label,
    Recording,
    Release,
    ReleaseGroup,
    Work,
)
from mbgraph.models.tree import list_items
from mbgraph.providers.cache.gates import passthrough_gate
from mbgraph.providers.musicbrainz.rate_limiter import RateLimiter
from mbgraph.providers.musicbrainz.transport import PROVIDER_NAME, Transport
from mbgraph.providers.musicbrainz.uri import (
    build_browse_uri,
    build_lookup_uri,
    build_search_uri,
    user_agent,
)
from mbgraph.utils.errors import MalformedResponseError
from mbgraph.utils.logging import get_logger

logger = get_logger(__name__)

R = TypeVar("R", bound=Resource)

#: Filters ``browse_release_groups`` sends when the caller gives none.
DEFAULT_RELEASE_GROUP_BROWSE_FILTERS: dict[str, Any] = {"type": "album|ep", "limit": 100}


class MusicBrainzClient:
    """Async client for the MusicBrainz XML/JSON web service (``/ws/2``).

    Parameters
    ----------
    settings:
        Connection, rate-limit and retry settings.  Defaults to
        ``Settings()`` (environment variables / ``.env``).
    http_client:
        Injected ``httpx.AsyncClient``.  When omitted the client creates one
        and closes it in :meth:`aclose`.
    rate_limiter:
        Shared limiter.  When omitted one is built from the settings.
    lookup_gate, browse_gate, search_gate:
        Cache gates for each operation family.  Default: always fetch.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
        lookup_gate: CacheGate = passthrough_gate,
        browse_gate: CacheGate = passthrough_gate,
        search_gate: CacheGate = passthrough_gate,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings or Settings()
        self._base_uri = self._settings.base_uri

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self._settings.request_timeout,
        )
        self._rate_limiter = rate_limiter or RateLimiter(
            self._settings.rate_limit_requests,
            self._settings.rate_limit_interval_ms,
        )
        self._transport = Transport(
            self._http_client,
            self._rate_limiter,
            user_agent(self._settings.app_name, self._settings.app_version),
            retry_delay=self._settings.retry_delay,
            max_retries=self._settings.max_retries,
            retry_backoff=self._settings.retry_backoff,
            sleep=sleep,
        )

        self._lookup_gate = lookup_gate
        self._browse_gate = browse_gate
        self._search_gate = search_gate

        logger.info(
            "musicbrainz_client_initialized",
            base_uri=self._base_uri,
            user_agent=self._transport.user_agent,
        )

    # ------------------------------------------------------------------
    # Configuration and lifetime
    # ------------------------------------------------------------------

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def configure(
        self,
        base_uri: str | None = None,
        rate_limit: tuple[int, int] | None = None,
    ) -> None:
        """Change the base URI and/or the ``(requests, interval_ms)`` rate policy.

        Affects requests started after the call only.
        """
        if base_uri is not None:
            self._base_uri = base_uri if base_uri.endswith("/") else base_uri + "/"
        if rate_limit is not None:
            requests, interval_ms = rate_limit
            self._rate_limiter.configure(requests, interval_ms)
        logger.info("musicbrainz_client_configured", base_uri=self._base_uri)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> MusicBrainzClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Raw operations
    # ------------------------------------------------------------------

    async def lookup(
        self,
        entity: str,
        mbid: str,
        includes: Sequence[str] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> dict[str, Any]:
        """Fetch ``<entity>/<mbid>`` and return the parsed document."""
        uri = build_lookup_uri(self._base_uri, entity, mbid, includes, fmt)
        return await self._lookup_gate(uri, force, lambda: self._transport.get(uri, fmt))

    async def browse(
        self,
        entity: str,
        mbid: str,
        other_entity: str,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> dict[str, Any]:
        """Fetch every *entity* directly linked to the *other_entity* *mbid*."""
        uri = build_browse_uri(self._base_uri, entity, mbid, other_entity, filters, fmt)
        return await self._browse_gate(uri, force, lambda: self._transport.get(uri, fmt))

    async def search(
        self,
        entity: str,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> dict[str, Any]:
        """Run an indexed search for *entity*."""
        uri = build_search_uri(self._base_uri, entity, query, filters, fmt)
        return await self._search_gate(uri, force, lambda: self._transport.get(uri, fmt))

    # ------------------------------------------------------------------
    # Resource construction
    # ------------------------------------------------------------------

    async def lookup_entity(
        self,
        cls: type[R],
        mbid: str | None,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
    ) -> R:
        """Look up a fresh, loaded *cls* instance with *linked_entities* merged in."""
        if not mbid:
            raise ValueError(f"Cannot look up a {cls.__name__} without an identifier")

        requested = list(linked_entities or [])
        document = await self.lookup(
            cls.entity_path,
            mbid,
            cls.lookup_includes(requested),
            force=force,
        )

        node = document.get(cls.envelope)
        if not isinstance(node, dict):
            raise MalformedResponseError(
                message=f"Lookup response for {cls.entity_path}/{mbid} has no <{cls.envelope}> element",
                provider_name=PROVIDER_NAME,
                status_code=200,
            )

        resource = cls.from_tree(node)
        if resource.id is None:
            resource.id = mbid
        resource.read_data(cls.lookup_categories(requested), node)
        resource.mark_fetched()

        logger.debug(
            "musicbrainz_lookup_complete",
            entity=cls.entity_path,
            mbid=mbid,
            loaded=list(resource.loaded_linked_entities),
        )
        return resource

    @staticmethod
    def _resources_from_list(kind: type[R], document: dict[str, Any]) -> list[R]:
        """Build one snapshot per element of ``<entity>-list`` in *document*."""
        container = document.get(f"{kind.entity_path}-list")
        resources: list[R] = []
        for node in list_items(container, kind.entity_path):
            if not isinstance(node, dict):
                continue
            resource = kind.from_tree(node)
            resource.search_score = _search_score(node)
            resource.read_embedded(node)
            resource.mark_fetched()
            resources.append(resource)
        return resources

    # ------------------------------------------------------------------
    # Typed lookups
    # ------------------------------------------------------------------

    async def _typed_lookup(
        self,
        cls: type[R],
        mbid: str,
        linked_entities: Sequence[str] | None,
        force: bool,
        fmt: str,
    ) -> R | dict[str, Any]:
        if fmt == "json":
            return await self.lookup(
                cls.entity_path,
                mbid,
                cls.lookup_includes(list(linked_entities or [])),
                force=force,
                fmt=fmt,
            )
        if fmt != "xml":
            raise ValueError(f"Unsupported response format {fmt!r}")
        return await self.lookup_entity(cls, mbid, linked_entities, force=force)

    async def lookup_disc_id(
        self, disc_id: str, *, force: bool = False, fmt: str = "xml"
    ) -> Disc | dict[str, Any]:
        """Releases containing the disc *disc_id*, with their mediums and tracks."""
        return await self._typed_lookup(Disc, disc_id, None, force, fmt)

    async def lookup_release(
        self,
        mbid: str,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> Release | dict[str, Any]:
        return await self._typed_lookup(Release, mbid, linked_entities, force, fmt)

    async def lookup_release_group(
        self,
        mbid: str,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> ReleaseGroup | dict[str, Any]:
        return await self._typed_lookup(ReleaseGroup, mbid, linked_entities, force, fmt)

    async def lookup_recording(
        self,
        mbid: str,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> Recording | dict[str, Any]:
        return await self._typed_lookup(Recording, mbid, linked_entities, force, fmt)

    async def lookup_artist(
        self,
        mbid: str,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> Artist | dict[str, Any]:
        return await self._typed_lookup(Artist, mbid, linked_entities, force, fmt)

    async def lookup_label(
        self,
        mbid: str,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> Label | dict[str, Any]:
        return await self._typed_lookup(Label, mbid, linked_entities, force, fmt)

    async def lookup_work(
        self,
        mbid: str,
        linked_entities: Sequence[str] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> Work | dict[str, Any]:
        return await self._typed_lookup(Work, mbid, linked_entities, force, fmt)

    # ------------------------------------------------------------------
    # Typed browses
    # ------------------------------------------------------------------

    async def browse_release_groups(
        self,
        mbid: str,
        other_entity: str,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[ReleaseGroup] | dict[str, Any]:
        """Release groups linked to *other_entity* *mbid*; albums and EPs by default."""
        if filters is None:
            filters = DEFAULT_RELEASE_GROUP_BROWSE_FILTERS
        document = await self.browse(
            ReleaseGroup.entity_path, mbid, other_entity, filters, force=force, fmt=fmt
        )
        if fmt == "json":
            return document
        return self._resources_from_list(ReleaseGroup, document)

    async def browse_releases(
        self,
        mbid: str,
        other_entity: str,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[Release] | dict[str, Any]:
        document = await self.browse(
            Release.entity_path, mbid, other_entity, filters, force=force, fmt=fmt
        )
        if fmt == "json":
            return document
        return self._resources_from_list(Release, document)

    # ------------------------------------------------------------------
    # Typed searches
    # ------------------------------------------------------------------

    async def _typed_search(
        self,
        cls: type[R],
        query: str | None,
        filters: Mapping[str, Any] | None,
        force: bool,
        fmt: str,
    ) -> list[R] | dict[str, Any]:
        document = await self.search(cls.entity_path, query, filters, force=force, fmt=fmt)
        if fmt == "json":
            return document
        results = self._resources_from_list(cls, document)
        logger.debug(
            "musicbrainz_search_complete",
            entity=cls.entity_path,
            query=query,
            result_count=len(results),
        )
        return results

    async def search_releases(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[Release] | dict[str, Any]:
        return await self._typed_search(Release, query, filters, force, fmt)

    async def search_release_groups(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[ReleaseGroup] | dict[str, Any]:
        return await self._typed_search(ReleaseGroup, query, filters, force, fmt)

    async def search_recordings(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[Recording] | dict[str, Any]:
        return await self._typed_search(Recording, query, filters, force, fmt)

    async def search_artists(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[Artist] | dict[str, Any]:
        return await self._typed_search(Artist, query, filters, force, fmt)

    async def search_labels(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[Label] | dict[str, Any]:
        return await self._typed_search(Label, query, filters, force, fmt)

    async def search_works(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        *,
        force: bool = False,
        fmt: str = "xml",
    ) -> list[Work] | dict[str, Any]:
        return await self._typed_search(Work, query, filters, force, fmt)


def _search_score(node: dict[str, Any]) -> int | None:
    """Relevance score of a search hit, or ``None`` when absent.

    The score is an attribute in the service's extension namespace, under
    whichever prefix the document declared (``ext:score``, ``ns2:score``).
    """
    attributes = node.get("@")
    if not isinstance(attributes, dict):
        return None
    for name, value in attributes.items():
        if name == "score" or name.endswith(":score"):
            try:
                return int(value)
            except (TypeError, ValueError):
                return None
    return None
