"""OpenGraph and Twitter Card extraction from `<meta>` tags.

All matching tags on a page collapse into a single item with the prefix
stripped from each key.
"""

from __future__ import annotations

from bs4 import BeautifulSoup

from ..types import DataFormat, JSONDict, StructuredDataItem
from .common import build_item


def _collect_meta(soup: BeautifulSoup, *, attribute: str, prefix: str) -> JSONDict:
    collected: JSONDict = {}
    for element in soup.find_all("meta", attrs={attribute: True}):
        key = element.get(attribute) or ""
        content = element.get("content")
        if not key.startswith(prefix) or not content:
            continue
        stripped = key[len(prefix):]
        if stripped:
            collected[stripped] = content
    return collected


def extract_open_graph(soup: BeautifulSoup, url: str) -> list[StructuredDataItem]:
    data = _collect_meta(soup, attribute="property", prefix="og:")
    if not data:
        return []
    return [build_item(url=url, data_format=DataFormat.OPENGRAPH, data=data, item_type="OpenGraph")]


def extract_twitter_cards(soup: BeautifulSoup, url: str) -> list[StructuredDataItem]:
    data = _collect_meta(soup, attribute="name", prefix="twitter:")
    if not data:
        return []
    return [
        build_item(url=url, data_format=DataFormat.TWITTER_CARDS, data=data, item_type="TwitterCard")
    ]


__all__ = [
    "extract_open_graph",
    "extract_twitter_cards",
]
