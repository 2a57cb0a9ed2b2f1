"""Configuration package for mbgraph."""

from mbgraph.config.loader import load_config
from mbgraph.config.settings import DEFAULT_BASE_URI, Settings

__all__ = ["DEFAULT_BASE_URI", "Settings", "load_config"]
