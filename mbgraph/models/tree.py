"""Helpers for reading the parsed response tree.

The XML tree stores a child that occurs once as a bare value and repeated
children as a list.  List containers (``release-list``, ``medium-list``, ...)
carry a ``count`` attribute, but on paged responses that count is the total
across all pages, so a page holding one element can still report
``count="25"``.  :func:`list_items` therefore consults the count first and
falls back to the value's actual shape.
"""

from __future__ import annotations

from typing import Any


def attr(node: Any, name: str) -> str | None:
    """Return attribute *name* of *node*, or ``None``."""
    if not isinstance(node, dict):
        return None
    attributes = node.get("@")
    if not isinstance(attributes, dict):
        return None
    return attributes.get(name)


def text_of(value: Any) -> str | None:
    """Character data of an element value (bare string or ``{"#": ...}``)."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        inner = value.get("#")
        return inner if isinstance(inner, str) else None
    return None


def child_text(node: Any, key: str) -> str | None:
    """Text of child element *key*, or ``None`` when the child is absent."""
    if not isinstance(node, dict) or key not in node:
        return None
    return text_of(node[key])


def child_int(node: Any, key: str) -> int | None:
    """Child element *key* as an int; non-numeric or missing gives ``None``."""
    value = child_text(node, key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def declared_count(container: Any) -> int | None:
    """The ``count`` attribute of a list container, if it has a numeric one."""
    count = attr(container, "count")
    if count is None:
        return None
    try:
        return int(count)
    except ValueError:
        return None


def as_list(value: Any) -> list[Any]:
    """Wrap a bare value into a one-element list; ``None`` and ``""`` become ``[]``."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def list_items(container: Any, key: str) -> list[Any]:
    """Elements *key* inside list *container*, always as a list.

    An absent container or an absent element key means zero elements.
    """
    if not isinstance(container, dict):
        return []
    items = container.get(key)
    if items is None or items == "":
        return []

    count = declared_count(container)
    if count is not None and count <= 1:
        return items if isinstance(items, list) else [items]
    return as_list(items)
