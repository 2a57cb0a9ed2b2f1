"""Unit tests for Settings, the YAML config loader, logging setup and the error hierarchy."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog
from pydantic import ValidationError

from mbgraph import __version__
from mbgraph.config.loader import load_config
from mbgraph.config.settings import DEFAULT_BASE_URI, Settings
from mbgraph.utils.errors import (
    ConfigurationError,
    MalformedResponseError,
    MBGraphError,
    ServiceBusyError,
    ServiceError,
    TransportError,
)
from mbgraph.utils.logging import configure_logging, configure_logging_from_settings, get_logger

_ENV_VARS = (
    "MBGRAPH_BASE_URI",
    "MBGRAPH_RATE_LIMIT_REQUESTS",
    "MBGRAPH_RATE_LIMIT_INTERVAL_MS",
    "MBGRAPH_MAX_RETRIES",
    "MBGRAPH_RETRY_DELAY",
    "MBGRAPH_LOG_LEVEL",
    "MBGRAPH_APP_ENV",
    "APP_ENV",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


# ======================================================================
# Settings
# ======================================================================


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.base_uri == DEFAULT_BASE_URI
        assert settings.rate_limit_requests == 1
        assert settings.rate_limit_interval_ms == 1000
        assert settings.retry_delay == 2.0
        assert settings.max_retries is None
        assert settings.retry_backoff == 1.0
        assert settings.app_version == __version__

    def test_base_uri_gets_trailing_slash(self) -> None:
        assert Settings(base_uri="http://localhost:5000/ws/2").base_uri == "http://localhost:5000/ws/2/"

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MBGRAPH_RATE_LIMIT_REQUESTS", "5")
        monkeypatch.setenv("MBGRAPH_MAX_RETRIES", "3")
        settings = Settings()
        assert settings.rate_limit_requests == 5
        assert settings.max_retries == 3

    @pytest.mark.parametrize(
        "overrides",
        [
            {"rate_limit_requests": 0},
            {"rate_limit_interval_ms": -5},
            {"max_retries": -1},
            {"retry_backoff": 0.5},
        ],
    )
    def test_rejects_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_from_config(self) -> None:
        settings = Settings.from_config(
            {
                "service": {"base_uri": "http://mirror.test/ws/2/", "timeout": 10},
                "rate_limit": {"requests": 3, "interval_ms": 2000},
                "retry": {"delay": 0.5, "max_retries": 4},
                "logging": {"level": "DEBUG"},
            }
        )
        assert settings.base_uri == "http://mirror.test/ws/2/"
        assert settings.request_timeout == 10
        assert settings.rate_limit_requests == 3
        assert settings.rate_limit_interval_ms == 2000
        assert settings.retry_delay == 0.5
        assert settings.max_retries == 4
        assert settings.retry_backoff == 1.0
        assert settings.log_level == "DEBUG"

    def test_from_empty_config_uses_defaults(self) -> None:
        assert Settings.from_config({}) == Settings()


# ======================================================================
# load_config
# ======================================================================


class TestLoadConfig:
    def test_missing_file_yields_defaults(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"))
        assert config["service"]["base_uri"] == DEFAULT_BASE_URI
        assert config["rate_limit"] == {"requests": 1, "interval_ms": 1000}
        assert config["retry"]["max_retries"] is None

    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "rate_limit:\n  requests: 2\nretry:\n  max_retries: 7\n",
            encoding="utf-8",
        )

        config = load_config(str(path))

        assert config["rate_limit"]["requests"] == 2
        assert config["rate_limit"]["interval_ms"] == 1000
        assert config["retry"]["max_retries"] == 7

    def test_environment_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("rate_limit:\n  requests: 2\n", encoding="utf-8")
        monkeypatch.setenv("MBGRAPH_RATE_LIMIT_REQUESTS", "9")

        config = load_config(str(path))

        assert config["rate_limit"]["requests"] == 9

    def test_round_trip_into_settings(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("service:\n  base_uri: http://mirror.test/ws/2\n", encoding="utf-8")

        settings = Settings.from_config(load_config(str(path)))

        assert settings.base_uri == "http://mirror.test/ws/2/"


# ======================================================================
# Logging
# ======================================================================


class TestLogging:
    @pytest.fixture(autouse=True)
    def _restore_logging(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)
        structlog.reset_defaults()

    def test_configure_logging_returns_logger(self) -> None:
        logger = configure_logging("DEBUG")
        assert logger is not None
        assert len(logging.getLogger().handlers) == 1

    def test_production_env_setting_selects_json_renderer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MBGRAPH_APP_ENV", "production")
        monkeypatch.setenv("MBGRAPH_LOG_LEVEL", "WARNING")

        configure_logging_from_settings(Settings())

        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)
        assert logging.getLogger().level == logging.WARNING

    def test_development_settings_use_console_renderer(self) -> None:
        configure_logging_from_settings(Settings(log_level="DEBUG"))

        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)
        assert logging.getLogger().level == logging.DEBUG

    def test_get_logger_binds_name(self) -> None:
        logger = get_logger("mbgraph.test")
        assert logger is not None


# ======================================================================
# Errors
# ======================================================================


class TestErrors:
    @pytest.mark.parametrize(
        "error_cls",
        [TransportError, ServiceError, MalformedResponseError, ServiceBusyError, ConfigurationError],
    )
    def test_hierarchy(self, error_cls: type[MBGraphError]) -> None:
        assert issubclass(error_cls, MBGraphError)

    def test_str_prefixes_provider(self) -> None:
        error = ServiceError(message="HTTP 404: Not Found", provider_name="musicbrainz", status_code=404)
        assert str(error) == "[musicbrainz] HTTP 404: Not Found"
        assert error.status_code == 404
        assert error.body_text == ""

    def test_str_without_provider(self) -> None:
        assert str(ConfigurationError(message="bad rate")) == "bad rate"

    def test_service_busy_attempts(self) -> None:
        assert ServiceBusyError(attempts=4).attempts == 4

    def test_malformed_response_carries_body(self) -> None:
        error = MalformedResponseError(status_code=502, body="<html>")
        assert error.status_code == 502
        assert error.body == "<html>"
