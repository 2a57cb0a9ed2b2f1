"""Unit tests for MusicBrainzClient: typed operations, resource lifecycle, cache gates."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from mbgraph.models import Artist, Disc, Label, Recording, Release, ReleaseGroup
from mbgraph.providers.cache.gates import CacheProviderGate
from mbgraph.providers.cache.memory_cache import MemoryCacheProvider
from mbgraph.providers.musicbrainz.client import MusicBrainzClient
from mbgraph.utils.errors import MalformedResponseError, ServiceError

BASE = "http://musicbrainz.test/ws/2/"
NIRVANA = "5b11f4ce-a62d-471e-81fc-a69a8278c7da"


def _requested_uris(mock_http_client: AsyncMock) -> list[str]:
    return [c.args[0] for c in mock_http_client.get.await_args_list]


# ======================================================================
# Lookups
# ======================================================================


class TestLookups:
    @pytest.mark.asyncio
    async def test_artist_with_releases(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_releases.xml"))

        artist = await client.lookup_artist(NIRVANA, ["releases"])

        assert _requested_uris(mock_http_client) == [f"{BASE}artist/{NIRVANA}?inc=releases"]
        assert isinstance(artist, Artist)
        assert artist.id == NIRVANA
        assert artist.loaded(["releases"]) is True
        assert [release.title for release in artist.releases] == ["Bleach", "Nevermind"]
        assert all(isinstance(release, Release) for release in artist.releases)
        assert artist.isnis == ["0000000123486830", "0000000123487390"]

    @pytest.mark.asyncio
    async def test_artist_without_releases(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_no_releases.xml"))

        artist = await client.lookup_artist(NIRVANA, ["releases"])

        assert artist.releases == []
        assert artist.loaded(["releases"]) is True

    @pytest.mark.asyncio
    async def test_release_with_all_categories(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("release_full.xml"))

        release = await client.lookup_release(
            "a4864e94-6d75-4ade-bc93-0dabf3521453",
            ["artists", "labels", "recordings", "release-groups"],
        )

        assert _requested_uris(mock_http_client) == [
            f"{BASE}release/a4864e94-6d75-4ade-bc93-0dabf3521453"
            "?inc=artists+labels+recordings+release-groups"
        ]
        assert release.artist_credits_string() == "Moby & Public Enemy"
        assert release.label_info[0].label.name == "Mute"
        assert release.is_loaded is True

    @pytest.mark.asyncio
    async def test_disc_id_always_requests_recordings(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("disc.xml"))

        disc = await client.lookup_disc_id("8zoD6PyBZz3O1qYpEkB7O3E1MSU-")

        assert _requested_uris(mock_http_client) == [
            f"{BASE}discid/8zoD6PyBZz3O1qYpEkB7O3E1MSU-?inc=recordings"
        ]
        assert isinstance(disc, Disc)
        assert disc.sectors == 330537
        assert disc.loaded(["releases"]) is True
        assert disc.releases[0].mediums[0].tracks[0].recording.title == "Honey"

    @pytest.mark.asyncio
    async def test_recording_relations(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("recording_rels.xml"))

        recording = await client.lookup_recording(
            "c9d3f0b2-1f2e-4c8e-9a77-3f0a2b5c6d01", ["artists", "artist-rels", "work-rels"]
        )

        assert isinstance(recording, Recording)
        assert recording.producer.name == "Butch Vig"
        assert recording.get_work_rel_by_type("performance") is not None
        assert recording.loaded(["artist-rels", "work-rels", "artist-credits"]) is True

    @pytest.mark.asyncio
    async def test_json_lookup_returns_raw_document_through_limiter(
        self, settings, mock_http_client, response_factory, mock_sleep
    ) -> None:
        limiter = MagicMock()
        limiter.acquire = AsyncMock()
        client = MusicBrainzClient(settings, http_client=mock_http_client, rate_limiter=limiter, sleep=mock_sleep)
        mock_http_client.get.return_value = response_factory(200, '{"id": "%s", "name": "Nirvana"}' % NIRVANA)

        document = await client.lookup_artist(NIRVANA, ["releases"], fmt="json")

        assert document == {"id": NIRVANA, "name": "Nirvana"}
        assert _requested_uris(mock_http_client) == [f"{BASE}artist/{NIRVANA}?inc=releases&fmt=json"]
        limiter.acquire.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_unknown_format_rejected(self, client) -> None:
        with pytest.raises(ValueError):
            await client.lookup_work("w1", fmt="yaml")

    @pytest.mark.asyncio
    async def test_missing_envelope_is_malformed(
        self, client, mock_http_client, response_factory
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, '<metadata><label id="l1"/></metadata>')

        with pytest.raises(MalformedResponseError):
            await client.lookup_artist(NIRVANA)

    @pytest.mark.asyncio
    async def test_lookup_requires_identifier(self, client) -> None:
        with pytest.raises(ValueError):
            await client.lookup_entity(Artist, None, [])

    @pytest.mark.asyncio
    async def test_raw_lookup_returns_tree(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_releases.xml"))

        tree = await client.lookup("artist", NIRVANA, ["releases"])

        assert tree["artist"]["release-list"]["@"]["count"] == "2"


# ======================================================================
# Searches and browses
# ======================================================================


class TestSearchAndBrowse:
    @pytest.mark.asyncio
    async def test_concurrent_searches_are_attributed_independently(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        bodies = {
            "Nirvana": load_fixture("search_artists_nirvana.xml"),
            "Moby": load_fixture("search_artists_moby.xml"),
        }

        async def fake_get(uri: str, headers: dict) -> MagicMock:
            name = "Nirvana" if "Nirvana" in uri else "Moby"
            # Answer the first request last.
            await asyncio.sleep(0.01 if name == "Nirvana" else 0)
            return response_factory(200, bodies[name])

        mock_http_client.get.side_effect = fake_get

        nirvana, moby = await asyncio.gather(
            client.search_artists("Nirvana"),
            client.search_artists("Moby"),
        )

        assert [artist.id for artist in nirvana] == [NIRVANA, "9282c8b4-ca0b-4c6b-b7e3-4f7762dfc4d6"]
        assert [artist.search_score for artist in nirvana] == [100, 87]
        assert [artist.name for artist in moby] == ["Moby"]
        assert moby[0].search_score == 100
        assert isinstance(moby[0].search_score, int)

    @pytest.mark.asyncio
    async def test_search_results_are_fetched_snapshots(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("search_artists_moby.xml"))

        (moby,) = await client.search_artists("Moby", {"limit": 1})

        assert moby.is_loaded is True
        assert moby.loaded_linked_entities == ()
        assert moby.gender == "male"
        assert _requested_uris(mock_http_client) == [f"{BASE}artist?limit=1&query=Moby"]

    @pytest.mark.asyncio
    async def test_search_with_no_hits(self, client, mock_http_client, response_factory) -> None:
        mock_http_client.get.return_value = response_factory(
            200, '<metadata><recording-list count="0" offset="0"/></metadata>'
        )

        assert await client.search_recordings("zzzz") == []

    @pytest.mark.asyncio
    async def test_search_score_under_any_extension_prefix(
        self, client, mock_http_client, response_factory
    ) -> None:
        mock_http_client.get.return_value = response_factory(
            200,
            '<metadata xmlns="http://musicbrainz.org/ns/mmd-2.0#" '
            'xmlns:ns2="http://musicbrainz.org/ns/ext#-2.0">'
            '<artist-list count="2" offset="0">'
            '<artist id="a1" ns2:score="91"><name>Air</name></artist>'
            '<artist id="a2"><name>Aire</name></artist>'
            "</artist-list></metadata>",
        )

        first, second = await client.search_artists("Air")

        assert first.search_score == 91
        assert second.search_score is None

    @pytest.mark.asyncio
    async def test_json_search_score(self, client, mock_http_client, response_factory) -> None:
        mock_http_client.get.return_value = response_factory(
            200, '{"count": 1, "artists": [{"id": "a1", "score": 98}]}'
        )

        document = await client.search_artists("Moby", fmt="json")

        assert document["artists"][0]["score"] == 98
        assert _requested_uris(mock_http_client) == [f"{BASE}artist?query=Moby&fmt=json"]

    @pytest.mark.asyncio
    async def test_browse_release_groups_default_filters(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("browse_release_groups.xml"))

        groups = await client.browse_release_groups(NIRVANA, "artist")

        assert _requested_uris(mock_http_client) == [
            f"{BASE}release-group?artist={NIRVANA}&type=album|ep&limit=100"
        ]
        assert all(isinstance(group, ReleaseGroup) for group in groups)
        assert [group.title for group in groups] == ["Bleach", "Incesticide"]
        assert groups[1].secondary_types == ["Compilation"]
        assert groups[0].secondary_types == []

    @pytest.mark.asyncio
    async def test_browse_releases_with_filters(
        self, client, mock_http_client, response_factory
    ) -> None:
        mock_http_client.get.return_value = response_factory(
            200, '<metadata><release-list count="1"><release id="r1"><title>Play</title></release></release-list></metadata>'
        )

        releases = await client.browse_releases("l1", "label", {"limit": 25})

        assert _requested_uris(mock_http_client) == [f"{BASE}release?label=l1&limit=25"]
        assert releases[0].title == "Play"


# ======================================================================
# Resource lifecycle
# ======================================================================


class TestResourceLifecycle:
    @pytest.mark.asyncio
    async def test_load_populates_in_place(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_releases.xml"))
        artist = Artist(NIRVANA)

        result = await artist.load(client, ["releases"])

        assert result is artist
        assert artist.name == "Nirvana"
        assert artist.loaded(["releases"]) is True
        assert len(artist.releases) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("categories", [[], ["releases"]])
    async def test_second_load_is_a_no_op(
        self, client, mock_http_client, response_factory, load_fixture, categories
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_releases.xml"))
        artist = Artist(NIRVANA)

        await artist.load(client, categories)
        await artist.load(client, categories)

        assert mock_http_client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_force_always_fetches(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_releases.xml"))
        artist = Artist(NIRVANA)

        await artist.load(client, ["releases"])
        await artist.load(client, ["releases"], force=True)

        assert mock_http_client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_new_category_triggers_fetch_and_replaces_lists(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.side_effect = [
            response_factory(200, load_fixture("artist_releases.xml")),
            response_factory(200, load_fixture("artist_single_release.xml")),
        ]
        artist = Artist(NIRVANA)

        await artist.load(client, ["releases"])
        await artist.load(client, ["releases", "aliases"])

        assert mock_http_client.get.await_count == 2
        assert [release.title for release in artist.releases] == ["Bleach"]
        assert artist.loaded(["releases", "aliases"]) is True

    @pytest.mark.asyncio
    async def test_update_refetches_loaded_categories(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_releases.xml"))
        artist = Artist(NIRVANA)
        await artist.load(client, ["releases"])

        await artist.update(client)

        uris = _requested_uris(mock_http_client)
        assert len(uris) == 2
        assert uris[0] == uris[1] == f"{BASE}artist/{NIRVANA}?inc=releases"

    @pytest.mark.asyncio
    async def test_failed_load_leaves_resource_untouched(
        self, client, mock_http_client, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.side_effect = [
            response_factory(200, load_fixture("artist_releases.xml")),
            response_factory(404, load_fixture("error_not_found.xml")),
        ]
        artist = Artist(NIRVANA)
        await artist.load(client, ["releases"])
        before = artist.data()

        with pytest.raises(ServiceError):
            await artist.load(client, ["releases"], force=True)

        assert artist.data() == before
        assert artist.loaded(["releases"]) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind, category",
        [
            (kind, category)
            for kind in (Artist, Disc, Label, Recording, Release, ReleaseGroup)
            for category in kind.linked_entities()
        ],
    )
    async def test_every_category_is_loaded_after_load(
        self, client, mock_http_client, response_factory, kind, category
    ) -> None:
        mock_http_client.get.return_value = response_factory(
            200, f'<metadata><{kind.envelope} id="x1"/></metadata>'
        )
        resource = kind("x1")

        await resource.load(client, [category])

        assert category in resource.loaded_linked_entities
        assert resource.loaded([category]) is True


# ======================================================================
# Configuration and cache gates
# ======================================================================


class TestClientConfiguration:
    @pytest.mark.asyncio
    async def test_configure_base_uri(
        self, client, mock_http_client, response_factory
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, '<metadata><work id="w1"/></metadata>')

        client.configure(base_uri="http://localhost:5000/ws/2")
        await client.lookup_work("w1")

        assert client.base_uri == "http://localhost:5000/ws/2/"
        assert _requested_uris(mock_http_client) == ["http://localhost:5000/ws/2/work/w1"]

    def test_configure_rate_limit(self, client) -> None:
        client.configure(rate_limit=(5, 2000))
        assert client.rate_limiter.policy.requests == 5
        assert client.rate_limiter.policy.interval_ms == 2000

    def test_clients_do_not_share_limiters(self, settings, mock_http_client) -> None:
        first = MusicBrainzClient(settings, http_client=mock_http_client)
        second = MusicBrainzClient(settings, http_client=mock_http_client)

        first.configure(rate_limit=(10, 1000))

        assert second.rate_limiter.policy.requests == settings.rate_limit_requests

    @pytest.mark.asyncio
    async def test_injected_http_client_is_not_closed(self, settings, mock_http_client) -> None:
        async with MusicBrainzClient(settings, http_client=mock_http_client):
            pass
        mock_http_client.aclose.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_gate_memoizes_by_uri(
        self, settings, mock_http_client, roomy_rate_limiter, mock_sleep, response_factory, load_fixture
    ) -> None:
        mock_http_client.get.return_value = response_factory(200, load_fixture("artist_releases.xml"))
        client = MusicBrainzClient(
            settings,
            http_client=mock_http_client,
            rate_limiter=roomy_rate_limiter,
            lookup_gate=CacheProviderGate(MemoryCacheProvider()),
            sleep=mock_sleep,
        )

        first = await client.lookup_artist(NIRVANA, ["releases"])
        second = await client.lookup_artist(NIRVANA, ["releases"])
        await client.lookup_artist(NIRVANA, ["releases"], force=True)

        assert mock_http_client.get.await_count == 2
        assert first is not second
        assert [r.title for r in first.releases] == [r.title for r in second.releases]
