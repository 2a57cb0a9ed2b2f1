"""Shared pytest fixtures for the mbgraph test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from mbgraph.config.settings import Settings
from mbgraph.providers.musicbrainz.client import MusicBrainzClient
from mbgraph.providers.musicbrainz.rate_limiter import RateLimiter


def make_response(status_code: int = 200, text: str = "") -> MagicMock:
    """A stand-in for ``httpx.Response`` exposing ``status_code`` and ``text``."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def response_factory():
    """Return :func:`make_response` for building fake HTTP responses."""
    return make_response


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_responses_dir(project_root: Path) -> Path:
    """Return the path to mock web-service response fixtures."""
    return project_root / "tests" / "fixtures" / "mock_responses"


@pytest.fixture
def load_fixture(mock_responses_dir: Path):
    """Return a loader reading a fixture file as text."""

    def _load(name: str) -> str:
        return (mock_responses_dir / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def settings() -> Settings:
    return Settings(
        base_uri="http://musicbrainz.test/ws/2/",
        app_name="mbgraph-test",
        app_version="0.1.0",
        retry_delay=2.0,
    )


@pytest.fixture
def mock_http_client() -> AsyncMock:
    """An ``httpx.AsyncClient`` double; set ``.get`` return values per test."""
    client = AsyncMock()
    client.get = AsyncMock(return_value=make_response(200, "<metadata/>"))
    return client


@pytest.fixture
def mock_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def roomy_rate_limiter() -> RateLimiter:
    """A limiter whose bucket never runs dry during a test."""
    return RateLimiter(requests=1000, interval_ms=1000)


@pytest.fixture
def client(
    settings: Settings,
    mock_http_client: AsyncMock,
    roomy_rate_limiter: RateLimiter,
    mock_sleep: AsyncMock,
) -> MusicBrainzClient:
    return MusicBrainzClient(
        settings,
        http_client=mock_http_client,
        rate_limiter=roomy_rate_limiter,
        sleep=mock_sleep,
    )
