"""Extractor package exports."""

from .common import ID_PROPERTIES, content_hash, extract_id
from .html_extractor import (
    FORMAT_EXTRACTORS,
    StructuredDataExtractor,
    StructuredDataExtractorConfig,
    extract_structured_data,
    parse_html,
)
from .jsonld import extract_json_ld
from .meta_tags import extract_open_graph, extract_twitter_cards
from .microdata import extract_microdata
from .rdfa import extract_rdfa

__all__ = [
    "FORMAT_EXTRACTORS",
    "ID_PROPERTIES",
    "StructuredDataExtractor",
    "StructuredDataExtractorConfig",
    "content_hash",
    "extract_id",
    "extract_json_ld",
    "extract_microdata",
    "extract_open_graph",
    "extract_rdfa",
    "extract_structured_data",
    "extract_twitter_cards",
    "parse_html",
]
