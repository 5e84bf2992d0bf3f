"""Accumulate streamed crawl results and keep the grouping current."""

from __future__ import annotations

import threading

from ..crawler.types import StructuredDataItem
from .export import ExportSnapshot
from .filters import ItemFilter
from .grouper import group_structured_data
from .types import StructuredDataSnippet


class ResultCollector:
    """Callback target for `CrawlPipeline.crawl`.

    Pass `collector.on_data` and `collector.on_progress` as the crawl
    callbacks; snippets are regrouped from the full item list on every data
    event.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[StructuredDataItem] = []
        self._snippets: list[StructuredDataSnippet] = []
        self.pages_crawled = 0
        self.structured_data_found = 0

    def on_data(self, new_items: list[StructuredDataItem]) -> None:
        if not new_items:
            return
        with self._lock:
            self._items.extend(new_items)
            self._snippets = group_structured_data(self._items)

    def on_progress(self, pages_crawled: int, structured_data_found: int) -> None:
        with self._lock:
            self.pages_crawled = pages_crawled
            self.structured_data_found = structured_data_found

    @property
    def items(self) -> list[StructuredDataItem]:
        with self._lock:
            return list(self._items)

    @property
    def snippets(self) -> list[StructuredDataSnippet]:
        with self._lock:
            return list(self._snippets)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            self._snippets = []
            self.pages_crawled = 0
            self.structured_data_found = 0

    def snapshot(self, item_filter: ItemFilter | None = None) -> ExportSnapshot:
        with self._lock:
            return ExportSnapshot.build(self._items, self._snippets, item_filter=item_filter)


__all__ = ["ResultCollector"]
