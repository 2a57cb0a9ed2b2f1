"""Utility modules for mbgraph.

- **errors** -- exception hierarchy rooted at MBGraphError; each request
  outcome (no response, error status, unparseable body, exhausted busy
  retries) has its own subclass.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from mbgraph.utils.errors import (
    ConfigurationError,
    MalformedResponseError,
    MBGraphError,
    ServiceBusyError,
    ServiceError,
    TransportError,
)
from mbgraph.utils.logging import configure_logging, configure_logging_from_settings, get_logger

__all__ = [
    "ConfigurationError",
    "MBGraphError",
    "MalformedResponseError",
    "ServiceBusyError",
    "ServiceError",
    "TransportError",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
]
