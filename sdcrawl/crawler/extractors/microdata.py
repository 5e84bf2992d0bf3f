"""Microdata extraction (`itemscope` / `itemprop` / `itemtype` / `itemid`)."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from ..types import DataFormat, JSONDict, JSONValue, StructuredDataItem
from .common import build_item, last_path_segment


HREF_TAGS = frozenset({"a", "area", "link"})
SRC_TAGS = frozenset({"img", "audio", "video", "source", "iframe", "embed"})


def property_value(element: Tag) -> str | None:
    """Read an itemprop value using the element-kind precedence order."""

    if element.has_attr("content"):
        value = element.get("content")
    elif element.name == "meta":
        value = None
    elif element.name in HREF_TAGS:
        value = element.get("href")
    elif element.name in SRC_TAGS:
        value = element.get("src")
    elif element.name == "time":
        value = element.get("datetime") or element.get_text().strip()
    else:
        value = element.get_text().strip()

    return value or None


def add_property(properties: JSONDict, name: str, value: JSONValue) -> None:
    """Store `value` under `name`, turning repeats into a list."""

    if name not in properties:
        properties[name] = value
        return

    existing = properties[name]
    if isinstance(existing, list):
        existing.append(value)
    else:
        properties[name] = [existing, value]


def extract_microdata(soup: BeautifulSoup, url: str) -> list[StructuredDataItem]:
    results: list[StructuredDataItem] = []

    for scope in soup.find_all(attrs={"itemscope": True}):
        itemtype = (scope.get("itemtype") or "").strip()
        itemid = (scope.get("itemid") or "").strip()

        properties: JSONDict = {}
        for prop_element in scope.find_all(attrs={"itemprop": True}):
            name = (prop_element.get("itemprop") or "").strip()
            if not name:
                continue
            value = property_value(prop_element)
            if value:
                add_property(properties, name, value)

        if not properties and not itemtype:
            continue

        data: JSONDict = dict(properties)
        if itemtype:
            data["itemtype"] = itemtype
        if itemid:
            data["itemid"] = itemid

        item_type = (last_path_segment(itemtype) if itemtype else "") or "Unknown"
        results.append(
            build_item(url=url, data_format=DataFormat.MICRODATA, data=data, item_type=item_type)
        )

    return results


__all__ = [
    "add_property",
    "extract_microdata",
    "property_value",
]
