"""Convert MusicBrainz XML documents into plain nested dicts.

The tree follows the long-standing xml2js conventions that the web service's
XML is usually consumed with:

- element attributes go under the ``"@"`` key, character data under ``"#"``;
- a child that occurs once is stored as a scalar, a repeated child as a list
  (consumers normalize with :func:`mbgraph.models.tree.list_items`);
- a leaf element without attributes collapses to its text (``""`` if empty);
- element tags lose their XML namespace, while namespaced attributes keep
  their document prefix (``ext:score``);
- the document element (``<metadata>`` / ``<error>``) is unwrapped.

Parsing uses the standard library's ElementTree.
"""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET
from typing import Any

ParseError = ET.ParseError


def parse_xml(body: str | bytes) -> dict[str, Any]:
    """Parse *body* and return the unwrapped document element as a dict.

    Raises
    ------
    xml.etree.ElementTree.ParseError
        If *body* is not well-formed XML (including an empty body).
    """
    raw = body.encode("utf-8") if isinstance(body, str) else body
    prefixes: dict[str, str] = {}
    root: ET.Element | None = None

    for event, item in ET.iterparse(io.BytesIO(raw), events=("start-ns", "end")):
        if event == "start-ns":
            prefix, uri = item
            if prefix:
                prefixes.setdefault(uri, prefix)
        else:
            root = item

    if root is None:  # pragma: no cover - iterparse raises first
        raise ParseError("no element found")

    converted = _convert(root, prefixes)
    if isinstance(converted, dict):
        return converted
    return {"#": converted} if converted else {}


def _convert(element: ET.Element, prefixes: dict[str, str]) -> Any:
    attributes = {
        _qualified_name(name, prefixes): value for name, value in element.attrib.items()
    }
    children = list(element)
    text = element.text if element.text and element.text.strip() else None

    if not attributes and not children:
        return element.text or ""

    node: dict[str, Any] = {}
    if attributes:
        node["@"] = attributes
    if text is not None:
        node["#"] = text

    for child in children:
        key = _local_name(child.tag)
        value = _convert(child, prefixes)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]

    return node


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _qualified_name(name: str, prefixes: dict[str, str]) -> str:
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    prefix = prefixes.get(uri)
    return f"{prefix}:{local}" if prefix else local
