"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- ``MBGRAPH_*`` set at deploy time

Only values that were actually provided through the environment override
the YAML; unset environment variables leave the YAML value in place.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from mbgraph.config.settings import Settings


def load_config(path: str = "config/config.yaml") -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = Settings()
    provided = settings.model_fields_set
    env_values = {
        "service": {
            "base_uri": settings.base_uri,
            "timeout": settings.request_timeout,
            "app_name": settings.app_name,
            "app_version": settings.app_version,
        },
        "rate_limit": {
            "requests": settings.rate_limit_requests,
            "interval_ms": settings.rate_limit_interval_ms,
        },
        "retry": {
            "delay": settings.retry_delay,
            "max_retries": settings.max_retries,
            "backoff": settings.retry_backoff,
        },
        "logging": {
            "level": settings.log_level,
            "env": settings.app_env,
        },
    }
    field_names = {
        ("service", "base_uri"): "base_uri",
        ("service", "timeout"): "request_timeout",
        ("service", "app_name"): "app_name",
        ("service", "app_version"): "app_version",
        ("rate_limit", "requests"): "rate_limit_requests",
        ("rate_limit", "interval_ms"): "rate_limit_interval_ms",
        ("retry", "delay"): "retry_delay",
        ("retry", "max_retries"): "max_retries",
        ("retry", "backoff"): "retry_backoff",
        ("logging", "level"): "log_level",
        ("logging", "env"): "app_env",
    }

    # Defaults fill gaps in the YAML; explicit environment values win.
    defaults: dict = {}
    overrides: dict = {}
    for (section, key), field_name in field_names.items():
        target = overrides if field_name in provided else defaults
        target.setdefault(section, {})[key] = env_values[section][key]

    merged: dict = {}
    _deep_merge(merged, defaults)
    _deep_merge(merged, yaml_config)
    _deep_merge(merged, overrides)
    return merged


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
