"""Helpers shared by every format extractor: hashing, id probing, item building."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from ..constants import CONTENT_HASH_LENGTH
from ..types import DataFormat, JSONDict, StructuredDataItem


ID_PROPERTIES = ("@id", "id", "itemid", "url", "sameAs", "mainEntityOfPage")


def content_hash(data: Any) -> str:
    """Fingerprint a payload independently of key insertion order."""

    serialized = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.md5(serialized.encode("utf-8")).hexdigest()[:CONTENT_HASH_LENGTH]


def _coerce_identifier(value: Any) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        for key in ("@id", "url"):
            nested = value.get(key)
            if isinstance(nested, str) and nested.strip():
                return nested.strip()
        return None
    if isinstance(value, list):
        for element in value:
            coerced = _coerce_identifier(element)
            if coerced:
                return coerced
    return None


def extract_id(data: JSONDict) -> str | None:
    """Return the first usable identifier from `ID_PROPERTIES`, in order."""

    for key in ID_PROPERTIES:
        if key not in data:
            continue
        identifier = _coerce_identifier(data[key])
        if identifier:
            return identifier
    return None


def last_path_segment(type_iri: str) -> str:
    """`http://schema.org/Product` -> `Product`; input without `/` is returned as-is."""

    return type_iri.rstrip().split("/")[-1]


def build_item(
    *,
    url: str,
    data_format: DataFormat,
    data: JSONDict,
    item_type: str | None,
) -> StructuredDataItem:
    return StructuredDataItem(
        url=url,
        format=data_format,
        type=item_type,
        data=data,
        id=extract_id(data),
        hash=content_hash(data),
    )


__all__ = [
    "ID_PROPERTIES",
    "build_item",
    "content_hash",
    "extract_id",
    "last_path_segment",
]
