"""Client settings loaded from environment variables via pydantic-settings.

Values come from two sources, in priority order:

  1. Environment variables, e.g. ``MBGRAPH_BASE_URI=http://localhost:5000/ws/2/``
  2. A ``.env`` file in the working directory

Field ``rate_limit_requests`` maps to ``MBGRAPH_RATE_LIMIT_REQUESTS`` and so
on.  Defaults match the public MusicBrainz etiquette of one request per
second and a fixed two-second pause after a 503.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mbgraph import __version__

DEFAULT_BASE_URI = "http://musicbrainz.org/ws/2/"


class Settings(BaseSettings):
    """mbgraph client settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_prefix="MBGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Web service ===
    base_uri: str = DEFAULT_BASE_URI
    request_timeout: float = 30.0

    # === Rate limiting (token refill: N requests per interval) ===
    rate_limit_requests: int = Field(default=1, gt=0)
    rate_limit_interval_ms: int = Field(default=1000, gt=0)

    # === 503 retry policy ===
    # max_retries=None keeps retrying for as long as the service says busy.
    retry_delay: float = Field(default=2.0, ge=0.0)
    max_retries: int | None = Field(default=None, ge=0)
    retry_backoff: float = Field(default=1.0, ge=1.0)

    # === User-Agent identification ===
    app_name: str = "mbgraph"
    app_version: str = __version__

    # === Logging ===
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator("base_uri")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        # Entity paths are appended directly, so the base must end in "/".
        return value if value.endswith("/") else value + "/"

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> Settings:
        """Build settings from the nested dict returned by ``load_config``."""
        service = config.get("service", {})
        rate_limit = config.get("rate_limit", {})
        retry = config.get("retry", {})
        logging_cfg = config.get("logging", {})

        values: dict[str, Any] = {
            "base_uri": service.get("base_uri"),
            "request_timeout": service.get("timeout"),
            "app_name": service.get("app_name"),
            "app_version": service.get("app_version"),
            "rate_limit_requests": rate_limit.get("requests"),
            "rate_limit_interval_ms": rate_limit.get("interval_ms"),
            "retry_delay": retry.get("delay"),
            "max_retries": retry.get("max_retries"),
            "retry_backoff": retry.get("backoff"),
            "log_level": logging_cfg.get("level"),
            "app_env": logging_cfg.get("env"),
        }
        return cls(**{key: value for key, value in values.items() if value is not None})
