"""Custom exception hierarchy for mbgraph.

All library exceptions inherit from :class:`MBGraphError`, which carries an
optional ``provider_name`` so callers can tell which remote service produced
the failure (normally ``"musicbrainz"``).

The hierarchy follows the outcome classes of a web-service request:

    MBGraphError  (base -- catch-all for any mbgraph error)
    +-- TransportError          (no response: DNS, connect, read failure)
    +-- ServiceError            (non-200, non-503 HTTP status)
    +-- MalformedResponseError  (body could not be parsed as XML / JSON)
    +-- ServiceBusyError        (503 retry cap exhausted, only when capped)
    +-- ConfigurationError      (invalid settings or rate-limit policy)

HTTP 503 is not an error by default: the transport retries it
transparently.  ``ServiceBusyError`` only surfaces when the client was
configured with an explicit ``max_retries`` ceiling.
"""

from __future__ import annotations


class MBGraphError(Exception):
    """Base exception for all mbgraph errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets
    for structured log output, e.g. ``[musicbrainz] HTTP 404: Not Found``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Transport-level errors
# ---------------------------------------------------------------------------

class TransportError(MBGraphError):
    """Raised when no HTTP response was obtained at all.

    Wraps the underlying ``httpx.HTTPError``.  Never retried.
    """

    def __init__(
        self,
        message: str = "Network request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ServiceBusyError(MBGraphError):
    """Raised when the service kept answering 503 past the configured cap."""

    def __init__(
        self,
        message: str = "Service busy, retry limit exhausted",
        provider_name: str | None = None,
        attempts: int = 0,
    ) -> None:
        self._attempts = attempts
        super().__init__(message=message, provider_name=provider_name)

    @property
    def attempts(self) -> int:
        return self._attempts


# ---------------------------------------------------------------------------
# Response-level errors
# ---------------------------------------------------------------------------

class ServiceError(MBGraphError):
    """Raised for any HTTP status other than 200 and 503.

    ``body_text`` holds whatever text the error document yielded (may be
    empty when the body carried no message).
    """

    def __init__(
        self,
        message: str = "Web service returned an error",
        provider_name: str | None = None,
        status_code: int = 0,
        body_text: str = "",
    ) -> None:
        self._status_code = status_code
        self._body_text = body_text
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def body_text(self) -> str:
        return self._body_text


class MalformedResponseError(MBGraphError):
    """Raised when a response body cannot be parsed in the requested format.

    ``status_code`` is the status of the response whose body failed to
    parse; for error statuses this replaces the :class:`ServiceError` that
    would otherwise have been raised.
    """

    def __init__(
        self,
        message: str = "Response body could not be parsed",
        provider_name: str | None = None,
        status_code: int = 0,
        body: str | None = None,
    ) -> None:
        self._status_code = status_code
        self._body = body
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def body(self) -> str | None:
        return self._body


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(MBGraphError):
    """Raised when configuration is invalid (bad URI, non-positive rate)."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
