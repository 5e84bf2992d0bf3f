"""Bounded recursive visitor over JSON-shaped payloads.

Paths use `.` between mapping keys and `[n]` for list positions, for example
`author.@id` or `mentions[2]`. The root has the empty path.
"""

from __future__ import annotations

import logging
from typing import Iterator, NamedTuple

from ..crawler.types import JSONValue


LOGGER = logging.getLogger(__name__)

MAX_WALK_DEPTH = 64


class PayloadNode(NamedTuple):
    path: str
    key: str | None
    value: JSONValue


def child_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def index_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def iter_nodes(
    value: JSONValue,
    path: str = "",
    *,
    key: str | None = None,
    max_depth: int = MAX_WALK_DEPTH,
) -> Iterator[PayloadNode]:
    """Yield every node of `value` in document order, containers first.

    `key` is the mapping key a node was found under (None for list elements
    and the root). Nodes deeper than `max_depth` are not visited.
    """

    yield from _walk(value, path, key, 0, max_depth)


def _walk(
    value: JSONValue,
    path: str,
    key: str | None,
    depth: int,
    max_depth: int,
) -> Iterator[PayloadNode]:
    yield PayloadNode(path, key, value)

    if not isinstance(value, (dict, list)):
        return
    if depth >= max_depth:
        LOGGER.debug("Payload walk stopped at depth %d (%s)", depth, path or "<root>")
        return

    if isinstance(value, dict):
        for child_key, child in value.items():
            yield from _walk(child, child_path(path, str(child_key)), str(child_key), depth + 1, max_depth)
    else:
        for index, child in enumerate(value):
            yield from _walk(child, index_path(path, index), None, depth + 1, max_depth)


def iter_strings(value: JSONValue, path: str = "") -> Iterator[tuple[str, str]]:
    """Yield `(path, text)` for every string leaf."""

    for node in iter_nodes(value, path):
        if isinstance(node.value, str):
            yield node.path, node.value


def iter_declared_ids(value: JSONValue) -> Iterator[str]:
    """Yield every non-empty string found under an `@id` key, at any depth."""

    for node in iter_nodes(value):
        if node.key == "@id" and isinstance(node.value, str) and node.value:
            yield node.value


__all__ = [
    "MAX_WALK_DEPTH",
    "PayloadNode",
    "child_path",
    "index_path",
    "iter_declared_ids",
    "iter_nodes",
    "iter_strings",
]
