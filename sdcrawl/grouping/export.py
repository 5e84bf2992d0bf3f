"""JSON export snapshot of a crawl's results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import json
import os
from pathlib import Path
import tempfile
from typing import Any, Mapping, Sequence

from ..crawler.constants import JSON_INDENT
from ..crawler.types import StructuredDataItem, utc_now_iso
from .filters import ItemFilter
from .types import StructuredDataSnippet


EXPORT_FILENAME_TEMPLATE = "structured-data-{day}.json"


def default_export_filename(day: date | None = None) -> str:
    """`structured-data-YYYY-MM-DD.json` for `day` (today by default)."""

    return EXPORT_FILENAME_TEMPLATE.format(day=(day or date.today()).isoformat())


@dataclass(slots=True)
class ExportSnapshot:
    """Point-in-time export: timestamp, total count, filtered items, all snippets."""

    crawled_at: str
    total_items: int
    items: list[StructuredDataItem]
    snippets: list[StructuredDataSnippet]

    @classmethod
    def build(
        cls,
        items: Sequence[StructuredDataItem],
        snippets: Sequence[StructuredDataSnippet],
        *,
        item_filter: ItemFilter | None = None,
    ) -> "ExportSnapshot":
        """Snapshot `items` (narrowed by `item_filter`) and the full snippet list."""

        selected = item_filter.filter_items(items) if item_filter else list(items)
        return cls(
            crawled_at=utc_now_iso(),
            total_items=len(items),
            items=selected,
            snippets=list(snippets),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "crawled_at": self.crawled_at,
            "total_items": self.total_items,
            "items": [item.to_json() for item in self.items],
            "snippets": [snippet.to_json() for snippet in self.snippets],
        }


def write_json(payload: Mapping[str, Any], path: str | Path) -> Path:
    """Write `payload` as JSON via a temp file and atomic replace."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(payload, ensure_ascii=False, indent=JSON_INDENT) + "\n"
    tmp_fd, tmp_path = tempfile.mkstemp(
        dir=str(target.parent),
        prefix=target.name + ".",
        suffix=".tmp",
    )
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    except Exception:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise
    return target


def write_export(snapshot: ExportSnapshot, path: str | Path) -> Path:
    return write_json(snapshot.to_json(), path)


__all__ = [
    "ExportSnapshot",
    "default_export_filename",
    "write_export",
    "write_json",
]
