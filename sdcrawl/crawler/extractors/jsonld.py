"""JSON-LD extraction from `<script type="application/ld+json">` blocks."""

from __future__ import annotations

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from ..types import DataFormat, StructuredDataItem
from .common import build_item


LOGGER = logging.getLogger(__name__)

JSON_LD_MIME = "application/ld+json"


def _is_json_ld_type(value: str | None) -> bool:
    if not value:
        return False
    return value.split(";", maxsplit=1)[0].strip().lower() == JSON_LD_MIME


def _item_type(node: dict[str, Any]) -> str:
    raw = node.get("@type")
    if isinstance(raw, list):
        text = ", ".join(str(value) for value in raw if value)
    else:
        text = str(raw) if raw else ""

    if text:
        return text
    return "Graph" if node.get("@graph") else "Unknown"


def extract_json_ld(soup: BeautifulSoup, url: str) -> list[StructuredDataItem]:
    """Return one item per top-level JSON object (array elements split out).

    A malformed block is logged and skipped; other blocks are still read.
    """

    results: list[StructuredDataItem] = []

    for index, script in enumerate(soup.find_all("script", type=_is_json_ld_type)):
        content = script.string if script.string is not None else script.get_text()
        content = (content or "").strip()
        if not content:
            continue

        try:
            parsed = json.loads(content, strict=False)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Failed to parse JSON-LD block %d on %s: %s", index, url, exc)
            continue

        nodes = parsed if isinstance(parsed, list) else [parsed]
        for node in nodes:
            if not isinstance(node, dict):
                continue
            results.append(
                build_item(
                    url=url,
                    data_format=DataFormat.JSON_LD,
                    data=node,
                    item_type=_item_type(node),
                )
            )

    return results


__all__ = ["extract_json_ld"]
