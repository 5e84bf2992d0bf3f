"""RDFa (Lite) extraction: `typeof` scopes with their own `property` elements."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from ..types import DataFormat, JSONDict, StructuredDataItem
from .common import build_item, last_path_segment
from .microdata import add_property


VALUE_ATTRIBUTES = ("content", "resource", "href", "src")


def _property_value(element: Tag) -> str | None:
    for attribute in VALUE_ATTRIBUTES:
        value = element.get(attribute)
        if value:
            return value
    return element.get_text().strip() or None


def _owning_scope(element: Tag) -> Tag | None:
    return element.find_parent(attrs={"typeof": True})


def extract_rdfa(soup: BeautifulSoup, url: str) -> list[StructuredDataItem]:
    """Return one item per `typeof` element.

    A `property` element belongs to its nearest enclosing `typeof` scope only,
    so nested entities do not leak their properties into the outer item.
    """

    results: list[StructuredDataItem] = []

    for scope in soup.find_all(attrs={"typeof": True}):
        type_value = (scope.get("typeof") or "").strip()
        if not type_value:
            continue

        data: JSONDict = {"@type": type_value}
        for prop_element in scope.find_all(attrs={"property": True}):
            if _owning_scope(prop_element) is not scope:
                continue
            name = (prop_element.get("property") or "").strip()
            value = _property_value(prop_element)
            if name and value:
                add_property(data, name, value)

        about = scope.get("about")
        resource = scope.get("resource")
        if about:
            data["@about"] = about
        if resource:
            data["@resource"] = resource

        results.append(
            build_item(
                url=url,
                data_format=DataFormat.RDFA,
                data=data,
                item_type=last_path_segment(type_value) or type_value,
            )
        )

    return results


__all__ = ["extract_rdfa"]
