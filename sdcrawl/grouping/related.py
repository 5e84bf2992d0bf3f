"""Graph queries over grouped snippets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .types import StructuredDataSnippet
from .walk import iter_declared_ids


@dataclass(slots=True)
class RelatedSnippets:
    """Snippets one hop away from a given snippet."""

    outgoing: list[StructuredDataSnippet] = field(default_factory=list)
    incoming: list[StructuredDataSnippet] = field(default_factory=list)

    def combined(self) -> list[StructuredDataSnippet]:
        """Outgoing then incoming, without repeats."""

        out = list(self.outgoing)
        seen = {snippet.hash for snippet in out}
        for snippet in self.incoming:
            if snippet.hash not in seen:
                seen.add(snippet.hash)
                out.append(snippet)
        return out


def owned_identifiers(snippet: StructuredDataSnippet) -> set[str]:
    """Identifiers a snippet answers to: id, any `@id`, `url` and `sameAs` values."""

    if not snippet.items:
        return set()

    item = snippet.representative
    owned: set[str] = set(iter_declared_ids(item.data))
    if item.id:
        owned.add(item.id)

    url = item.data.get("url")
    if isinstance(url, str) and url:
        owned.add(url)

    same_as = item.data.get("sameAs")
    if isinstance(same_as, str):
        same_as = [same_as]
    if isinstance(same_as, list):
        owned.update(value for value in same_as if isinstance(value, str) and value)

    return owned


def find_related_snippets(
    target: StructuredDataSnippet,
    snippets: Sequence[StructuredDataSnippet],
) -> RelatedSnippets:
    """Return snippets `target` links to and snippets linking to `target`."""

    by_hash = {snippet.hash: snippet for snippet in snippets}
    related = RelatedSnippets()

    seen_outgoing: set[str] = set()
    for connection in target.connections:
        target_hash = connection.target_hash
        if not target_hash or target_hash == target.hash or target_hash in seen_outgoing:
            continue
        snippet = by_hash.get(target_hash)
        if snippet is None:
            continue
        seen_outgoing.add(target_hash)
        related.outgoing.append(snippet)

    owned = owned_identifiers(target)
    seen_incoming: set[str] = set()
    for snippet in snippets:
        if snippet.hash == target.hash or snippet.hash in seen_incoming:
            continue
        if any(
            connection.target_hash == target.hash or connection.target_id in owned
            for connection in snippet.connections
        ):
            seen_incoming.add(snippet.hash)
            related.incoming.append(snippet)

    return related


__all__ = [
    "RelatedSnippets",
    "find_related_snippets",
    "owned_identifiers",
]
