"""Grouping package: content-hash snippets, connections, filtering and export."""

from .collector import ResultCollector
from .export import ExportSnapshot, default_export_filename, write_export, write_json
from .filters import ItemFilter, unique_formats, unique_types
from .grouper import (
    LINK_PROPERTIES,
    build_identifier_index,
    build_page_url_index,
    classify_connection,
    find_connections,
    group_structured_data,
)
from .related import RelatedSnippets, find_related_snippets, owned_identifiers
from .types import Connection, ConnectionType, StructuredDataSnippet

__all__ = [
    "Connection",
    "ConnectionType",
    "ExportSnapshot",
    "ItemFilter",
    "LINK_PROPERTIES",
    "RelatedSnippets",
    "ResultCollector",
    "StructuredDataSnippet",
    "build_identifier_index",
    "build_page_url_index",
    "classify_connection",
    "default_export_filename",
    "find_connections",
    "find_related_snippets",
    "group_structured_data",
    "owned_identifiers",
    "unique_formats",
    "unique_types",
    "write_export",
    "write_json",
]
