"""One rate-limited HTTP GET against the web service, classified and parsed.

Outcome classes:

- no response at all             -> :class:`TransportError`, never retried
- ``503 Service Unavailable``    -> wait ``retry_delay`` and send again
- ``200 OK``                     -> parsed body (XML tree or JSON dict)
- any other status               -> :class:`ServiceError` carrying the
  status and the error document's text, or :class:`MalformedResponseError`
  tagged with that status when the error body itself does not parse

Every attempt, retries included, takes one permit from the shared
:class:`~mbgraph.providers.musicbrainz.rate_limiter.RateLimiter`.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable

import httpx

from mbgraph.providers.musicbrainz.rate_limiter import RateLimiter
from mbgraph.providers.musicbrainz.xml_tree import ParseError, parse_xml
from mbgraph.utils.errors import (
    MalformedResponseError,
    ServiceBusyError,
    ServiceError,
    TransportError,
)
from mbgraph.utils.logging import get_logger

logger = get_logger(__name__)

PROVIDER_NAME = "musicbrainz"

_ACCEPT = {
    "xml": "application/xml",
    "json": "application/json",
}


class Transport:
    """Sends GET requests through the rate limiter and retries on 503.

    The ``httpx.AsyncClient`` is injected; the transport never closes it.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rate_limiter: RateLimiter,
        user_agent: str,
        *,
        retry_delay: float = 2.0,
        max_retries: int | None = None,
        retry_backoff: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._http_client = http_client
        self._rate_limiter = rate_limiter
        self._user_agent = user_agent
        self._retry_delay = retry_delay
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff
        self._sleep = sleep

    @property
    def user_agent(self) -> str:
        return self._user_agent

    async def get(self, uri: str, fmt: str = "xml") -> dict[str, Any]:
        """Fetch *uri* and return its parsed body.

        Raises
        ------
        TransportError
            No response was received.
        ServiceError
            The service answered with a status other than 200 and 503.
        MalformedResponseError
            The body could not be parsed as *fmt*.
        ServiceBusyError
            ``max_retries`` is set and the service kept answering 503.
        """
        headers = {"User-Agent": self._user_agent, "Accept": _ACCEPT[fmt]}
        delay = self._retry_delay
        attempt = 0

        while True:
            attempt += 1
            await self._rate_limiter.acquire(1)

            logger.debug("musicbrainz_request", uri=uri, attempt=attempt)
            try:
                response = await self._http_client.get(uri, headers=headers)
            except httpx.HTTPError as exc:
                logger.warning("musicbrainz_transport_error", uri=uri, error=str(exc))
                raise TransportError(
                    message=f"Request to {uri} failed: {exc}",
                    provider_name=PROVIDER_NAME,
                ) from exc

            if response.status_code != 503:
                break

            if self._max_retries is not None and attempt > self._max_retries:
                raise ServiceBusyError(
                    message=f"Service still busy after {attempt} attempts: {uri}",
                    provider_name=PROVIDER_NAME,
                    attempts=attempt,
                )
            logger.warning(
                "musicbrainz_service_busy",
                uri=uri,
                attempt=attempt,
                retry_in=delay,
            )
            await self._sleep(delay)
            delay *= self._retry_backoff

        if response.status_code == 200:
            return self._parse(response.text, fmt, status_code=200)

        document = self._parse(response.text, fmt, status_code=response.status_code)
        body_text = _error_text(document)
        logger.info(
            "musicbrainz_service_error",
            uri=uri,
            status_code=response.status_code,
            body_text=body_text,
        )
        message = f"HTTP {response.status_code}"
        if body_text:
            message += f": {body_text}"
        raise ServiceError(
            message=message,
            provider_name=PROVIDER_NAME,
            status_code=response.status_code,
            body_text=body_text,
        )

    @staticmethod
    def _parse(body: str, fmt: str, status_code: int) -> dict[str, Any]:
        try:
            if fmt == "json":
                document = json.loads(body)
            else:
                document = parse_xml(body)
        except (ParseError, ValueError) as exc:
            raise MalformedResponseError(
                message=f"Could not parse {fmt} body of HTTP {status_code} response: {exc}",
                provider_name=PROVIDER_NAME,
                status_code=status_code,
                body=body,
            ) from exc

        if not isinstance(document, dict):
            raise MalformedResponseError(
                message=f"Expected a {fmt} document, got {type(document).__name__}",
                provider_name=PROVIDER_NAME,
                status_code=status_code,
                body=body,
            )
        return document


def _error_text(document: dict[str, Any]) -> str:
    """Message of an error document: ``<error><text>..</text></error>`` or ``{"error": ..}``."""
    value = document.get("text", document.get("error"))
    if isinstance(value, dict):
        value = value.get("#", value.get("text"))
    if isinstance(value, list):
        return " ".join(item for item in value if isinstance(item, str))
    return value if isinstance(value, str) else ""
