"""Run every format extractor over one HTML page."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from bs4 import BeautifulSoup

from ..constants import DEFAULT_MARKUP_PARSER
from ..types import DataFormat, StructuredDataItem
from .jsonld import extract_json_ld
from .meta_tags import extract_open_graph, extract_twitter_cards
from .microdata import extract_microdata
from .rdfa import extract_rdfa


LOGGER = logging.getLogger(__name__)

FormatExtractor = Callable[[BeautifulSoup, str], list[StructuredDataItem]]

# Output order: items are returned grouped by format in this order.
FORMAT_EXTRACTORS: dict[DataFormat, FormatExtractor] = {
    DataFormat.JSON_LD: extract_json_ld,
    DataFormat.MICRODATA: extract_microdata,
    DataFormat.RDFA: extract_rdfa,
    DataFormat.OPENGRAPH: extract_open_graph,
    DataFormat.TWITTER_CARDS: extract_twitter_cards,
}


def parse_html(html: str | bytes, markup_parser: str = DEFAULT_MARKUP_PARSER) -> BeautifulSoup:
    """Parse HTML into a tree queryable by tag name and attribute presence."""

    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    return BeautifulSoup(html, markup_parser)


@dataclass(slots=True)
class StructuredDataExtractorConfig:
    """Config for structured-data extraction."""

    markup_parser: str = DEFAULT_MARKUP_PARSER
    formats: tuple[DataFormat, ...] = field(default_factory=lambda: tuple(FORMAT_EXTRACTORS))


class StructuredDataExtractor:
    """Extract JSON-LD, Microdata, RDFa, OpenGraph and Twitter Card items."""

    def __init__(self, config: StructuredDataExtractorConfig | None = None) -> None:
        self.config = config or StructuredDataExtractorConfig()

    def extract(self, html: str | bytes, url: str) -> list[StructuredDataItem]:
        """Parse `html` and extract items attributed to `url`."""

        return self.extract_from_soup(parse_html(html, self.config.markup_parser), url)

    def extract_from_soup(self, soup: BeautifulSoup, url: str) -> list[StructuredDataItem]:
        """Extract items from an already parsed document."""

        results: list[StructuredDataItem] = []
        for data_format in FORMAT_EXTRACTORS:
            if data_format not in self.config.formats:
                continue
            found = FORMAT_EXTRACTORS[data_format](soup, url)
            if found:
                LOGGER.debug("Found %d %s item(s) on %s", len(found), data_format.value, url)
            results.extend(found)
        return results


def extract_structured_data(html: str | bytes, url: str) -> list[StructuredDataItem]:
    """Extract all supported formats with default settings."""

    return StructuredDataExtractor().extract(html, url)


__all__ = [
    "FORMAT_EXTRACTORS",
    "StructuredDataExtractor",
    "StructuredDataExtractorConfig",
    "extract_structured_data",
    "parse_html",
]
