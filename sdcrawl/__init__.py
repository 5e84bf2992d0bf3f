"""Structured-data site crawler: crawl, extract, and cross-link snippets."""

__version__ = "0.1.0"
