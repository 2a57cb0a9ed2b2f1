"""Request URI construction and client identification.

The built URI doubles as the cache key handed to the cache gates, so it is
assembled by hand in a fixed parameter order instead of through httpx's
``params=`` encoding::

    lookup  <base><entity>/<mbid>[?inc=a+b][&fmt=json]
    browse  <base><entity>?<other>=<mbid>[&key=value...][&fmt=json]
    search  <base><entity>?[limit=..&offset=..&]query=<terms>[&fmt=json]
"""

from __future__ import annotations

import platform
import re
from typing import Any, Mapping, Sequence
from urllib.parse import quote

# Lucene query syntax characters escaped in free-text search terms.
_LUCENE_RESERVED = re.compile(r"([.*+?^=!:${}()|\[\]/\\])")

_PAGING_KEYS = ("limit", "offset")

_AND = quote(" AND ")

FORMATS = ("xml", "json")


def user_agent(app_name: str, app_version: str) -> str:
    """``App/Version (python/X.Y.Z; OS/release)``, as the service's usage policy asks."""
    return (
        f"{app_name}/{app_version} "
        f"(python/{platform.python_version()}; {platform.system()}/{platform.release()})"
    )


def escape_lucene(term: str) -> str:
    """Backslash-escape Lucene reserved characters in a free-text term."""
    return _LUCENE_RESERVED.sub(r"\\\1", term)


def _check_format(fmt: str) -> None:
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported response format {fmt!r}; expected one of {FORMATS}")


def _with_format(uri: str, fmt: str) -> str:
    _check_format(fmt)
    if fmt == "xml":
        return uri
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}fmt={fmt}"


def build_lookup_uri(
    base_uri: str,
    entity: str,
    mbid: str,
    includes: Sequence[str] | None = None,
    fmt: str = "xml",
) -> str:
    uri = f"{base_uri}{entity}/{mbid}"
    if includes:
        uri += "?inc=" + "+".join(includes)
    return _with_format(uri, fmt)


def build_browse_uri(
    base_uri: str,
    entity: str,
    mbid: str,
    other_entity: str,
    filters: Mapping[str, Any] | None = None,
    fmt: str = "xml",
) -> str:
    """Browse URI; filter values are passed through untouched (``type=album|ep``)."""
    uri = f"{base_uri}{entity}?{other_entity}={mbid}"
    for key, value in (filters or {}).items():
        uri += f"&{key}={value}"
    return _with_format(uri, fmt)


def build_search_uri(
    base_uri: str,
    entity: str,
    query: str | None,
    filters: Mapping[str, Any] | None = None,
    fmt: str = "xml",
) -> str:
    """Search URI.

    ``limit`` and ``offset`` become plain parameters.  Every other filter
    becomes a ``key:value`` term ANDed onto the query.  Only the free-text
    *query* is Lucene-escaped; filter values are assumed to be valid query
    syntax already.
    """
    params: list[str] = []
    terms: list[str] = []
    for key, value in (filters or {}).items():
        if key in _PAGING_KEYS:
            params.append(f"{key}={value}")
        else:
            terms.append(f"{key}:{quote(str(value), safe='')}")

    clauses: list[str] = []
    if query:
        clauses.append(quote(escape_lucene(query), safe=""))
    if terms:
        clauses.append(_AND.join(terms))
    params.append("query=" + _AND.join(clauses))

    return _with_format(f"{base_uri}{entity}?" + "&".join(params), fmt)
