"""Group extracted items by content hash and infer links between the groups.

`group_structured_data` is a pure function: callers re-run it over the whole
accumulated item list whenever new items arrive.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..crawler.types import StructuredDataItem
from .types import Connection, ConnectionType, StructuredDataSnippet
from .walk import iter_declared_ids, iter_strings


# Properties commonly used for linking; searched before the full payload walk.
LINK_PROPERTIES = (
    "@id",
    "id",
    "sameAs",
    "mainEntity",
    "about",
    "author",
    "publisher",
    "mainEntityOfPage",
    "url",
    "itemid",
    "resource",
    "isPartOf",
    "hasPart",
    "creator",
    "mentions",
    "citation",
    "workExample",
    "exampleOfWork",
)

# Checked in order; first substring hit wins.
_CONNECTION_KEYWORDS: tuple[tuple[tuple[str, ...], ConnectionType], ...] = (
    (("sameas",), ConnectionType.SAME_AS),
    (("mainentity",), ConnectionType.MAIN_ENTITY),
    (("about",), ConnectionType.ABOUT),
    (("author", "creator"), ConnectionType.AUTHOR),
    (("publisher",), ConnectionType.PUBLISHER),
)

IdentifierIndex = dict[str, str]


def classify_connection(path: str) -> ConnectionType:
    """Label an edge from the payload path it was found at."""

    lowered = path.lower()
    for keywords, connection_type in _CONNECTION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return connection_type
    return ConnectionType.REFERENCE


def build_identifier_index(items: Iterable[StructuredDataItem]) -> IdentifierIndex:
    """Map identifiers to the hash of the item that owns them.

    Every string under an `@id` key, at any depth, is claimed by the item
    whose payload contains it. Identifiers an item declares for itself (its
    extracted `id` and its top-level `@id`) take precedence over `@id` values
    nested inside other payloads, so a reference such as
    `{"itemReviewed": {"@id": "#w1"}}` does not steal `#w1` from the item
    that declares it. Within each of the two tiers the last item wins.
    """

    nested: IdentifierIndex = {}
    declared: IdentifierIndex = {}

    for item in items:
        for identifier in iter_declared_ids(item.data):
            nested[identifier] = item.hash

        root_id = item.data.get("@id")
        if isinstance(root_id, str) and root_id:
            declared[root_id] = item.hash
        if item.id:
            declared[item.id] = item.hash

    index = dict(nested)
    index.update(declared)
    return index


def build_page_url_index(items: Iterable[StructuredDataItem]) -> IdentifierIndex:
    """Map each page URL to the hash of the last item extracted from it."""

    return {item.url: item.hash for item in items}


def find_connections(
    item: StructuredDataItem,
    index: IdentifierIndex,
    page_index: IdentifierIndex | None = None,
) -> list[Connection]:
    """Return outgoing edges found in `item`'s payload.

    The well-known link properties are searched first, then the whole payload.
    A string is resolved through `index` first; when that finds nothing, or
    only `item` itself, the page URL index is tried. Edges back to the item's
    own hash are dropped, as are repeats of the same (type, target, path).
    """

    connections: list[Connection] = []
    seen: set[tuple[ConnectionType, str, str]] = set()

    def resolve(value: str) -> str | None:
        target_hash = index.get(value)
        if (target_hash is None or target_hash == item.hash) and page_index:
            target_hash = page_index.get(value, target_hash)
        return target_hash

    def consider(path: str, value: str) -> None:
        target_hash = resolve(value)
        if target_hash is None or target_hash == item.hash:
            return
        connection_type = classify_connection(path)
        key = (connection_type, value, path)
        if key in seen:
            return
        seen.add(key)
        connections.append(
            Connection(
                type=connection_type,
                target_id=value,
                target_hash=target_hash,
                property=path,
                value=value,
            )
        )

    for name in LINK_PROPERTIES:
        value = item.data.get(name)
        if value:
            for path, text in iter_strings(value, name):
                consider(path, text)

    for path, text in iter_strings(item.data):
        consider(path, text)

    return connections


def group_structured_data(items: Sequence[StructuredDataItem]) -> list[StructuredDataSnippet]:
    """Collapse items into snippets, link them, most-duplicated first."""

    index = build_identifier_index(items)
    page_index = build_page_url_index(items)

    snippets: dict[str, StructuredDataSnippet] = {}
    for item in items:
        snippet = snippets.get(item.hash)
        if snippet is None:
            snippet = StructuredDataSnippet(hash=item.hash)
            snippets[item.hash] = snippet
        snippet.add(item)

    for snippet in snippets.values():
        snippet.connections = find_connections(snippet.representative, index, page_index)

    # sorted() is stable, so equal counts keep first-seen order.
    return sorted(snippets.values(), key=lambda snippet: snippet.duplicate_count, reverse=True)


__all__ = [
    "LINK_PROPERTIES",
    "IdentifierIndex",
    "build_identifier_index",
    "build_page_url_index",
    "classify_connection",
    "find_connections",
    "group_structured_data",
]
