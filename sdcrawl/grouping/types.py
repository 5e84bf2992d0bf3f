"""Snippet and connection records produced by the grouper."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..crawler.constants import MIXED_FORMAT
from ..crawler.types import DataFormat, JSONDict, StructuredDataItem


class ConnectionType(str, Enum):
    """Edge label derived from the payload property that produced the edge."""

    REFERENCE = "reference"
    SAME_AS = "sameAs"
    MAIN_ENTITY = "mainEntity"
    ABOUT = "about"
    AUTHOR = "author"
    PUBLISHER = "publisher"


@dataclass(frozen=True, slots=True)
class Connection:
    """Directed edge from one snippet to the snippet owning `target_id`."""

    type: ConnectionType
    target_id: str
    property: str
    value: str
    target_hash: str | None = None

    def to_json(self) -> JSONDict:
        return {
            "type": self.type.value,
            "target_id": self.target_id,
            "target_hash": self.target_hash,
            "property": self.property,
            "value": self.value,
        }


@dataclass(slots=True)
class StructuredDataSnippet:
    """All items sharing one content hash.

    `format` holds a `DataFormat` value, or `"Mixed"` when member items came
    from different formats.
    """

    hash: str
    items: list[StructuredDataItem] = field(default_factory=list)
    type: str | None = None
    format: str = ""
    connections: list[Connection] = field(default_factory=list)

    @property
    def duplicate_count(self) -> int:
        return len(self.items)

    @property
    def representative(self) -> StructuredDataItem:
        return self.items[0]

    @property
    def is_mixed(self) -> bool:
        return self.format == MIXED_FORMAT

    def add(self, item: StructuredDataItem) -> None:
        """Append a member item, switching to `Mixed` on a format disagreement."""

        if item.hash != self.hash:
            raise ValueError(f"Item hash {item.hash} does not belong to snippet {self.hash}")

        item_format = _format_value(item.format)
        if not self.items:
            self.type = item.type
            self.format = item_format
        elif self.format != item_format:
            self.format = MIXED_FORMAT
        self.items.append(item)

    def to_json(self) -> JSONDict:
        return {
            "hash": self.hash,
            "type": self.type,
            "format": self.format,
            "duplicate_count": self.duplicate_count,
            "items": [item.to_json() for item in self.items],
            "connections": [connection.to_json() for connection in self.connections],
        }


def _format_value(value: DataFormat | str) -> str:
    return value.value if isinstance(value, DataFormat) else str(value)


__all__ = [
    "Connection",
    "ConnectionType",
    "StructuredDataSnippet",
]
