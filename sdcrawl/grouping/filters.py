"""Search/type/format filtering over items and snippets."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Iterable

from ..crawler.types import DataFormat, StructuredDataItem
from .types import StructuredDataSnippet


ALL = "all"


def _format_value(value: DataFormat | str) -> str:
    return value.value if isinstance(value, DataFormat) else str(value)


@dataclass(frozen=True, slots=True)
class ItemFilter:
    """Case-insensitive search plus exact type/format selection.

    `"all"` disables the type or format check; an empty search matches
    everything.
    """

    search_term: str = ""
    item_type: str = ALL
    item_format: str = ALL

    @property
    def active(self) -> bool:
        return bool(self.search_term) or self.item_type != ALL or self.item_format != ALL

    def matches_search(self, item: StructuredDataItem) -> bool:
        if not self.search_term:
            return True
        needle = self.search_term.lower()
        if needle in item.url.lower():
            return True
        if item.type and needle in item.type.lower():
            return True
        return needle in json.dumps(item.data, ensure_ascii=False).lower()

    def matches_item(self, item: StructuredDataItem) -> bool:
        if self.item_type != ALL and item.type != self.item_type:
            return False
        if self.item_format != ALL and _format_value(item.format) != self.item_format:
            return False
        return self.matches_search(item)

    def matches_snippet(self, snippet: StructuredDataSnippet) -> bool:
        if self.item_type != ALL and snippet.type != self.item_type:
            return False
        if self.item_format != ALL and snippet.format != self.item_format:
            return False
        return any(self.matches_search(item) for item in snippet.items)

    def filter_items(self, items: Iterable[StructuredDataItem]) -> list[StructuredDataItem]:
        return [item for item in items if self.matches_item(item)]

    def filter_snippets(self, snippets: Iterable[StructuredDataSnippet]) -> list[StructuredDataSnippet]:
        return [snippet for snippet in snippets if self.matches_snippet(snippet)]


def unique_types(items: Iterable[StructuredDataItem]) -> list[str]:
    """Sorted distinct non-empty item types."""

    return sorted({item.type for item in items if item.type})


def unique_formats(items: Iterable[StructuredDataItem]) -> list[str]:
    """Sorted distinct item formats."""

    return sorted({_format_value(item.format) for item in items})


__all__ = [
    "ALL",
    "ItemFilter",
    "unique_formats",
    "unique_types",
]
