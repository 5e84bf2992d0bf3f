"""Default values shared by crawler config, fetcher, and pipeline."""

from __future__ import annotations


DEFAULT_MAX_PAGES = 50
DEFAULT_MAX_DEPTH = 3
DEFAULT_DELAY_MS = 1000
DEFAULT_RESPECT_ROBOTS = True

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_ROBOTS_TIMEOUT_SECONDS = 5.0
DEFAULT_RETRIES = 0
DEFAULT_RETRY_BACKOFF_SECONDS = 1.0

DEFAULT_MAX_FRONTIER_SIZE = 1000
DEFAULT_MARKUP_PARSER = "lxml"

DEFAULT_USER_AGENT = "StructuredDataCrawler/1.0"
ROBOTS_AGENT_TOKEN = "structureddatacrawler"

DEFAULT_HTTP_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "no-cache",
}

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

# Recommended (not enforced) operating ranges; values outside only log a warning.
RECOMMENDED_MAX_PAGES = (1, 1000)
RECOMMENDED_MAX_DEPTH = (1, 10)
RECOMMENDED_DELAY_MS = (100, 10000)

SUPPORTED_CONFIG_SUFFIXES = (".json", ".yaml", ".yml")
JSON_INDENT = 2

CONTENT_HASH_LENGTH = 16
MIXED_FORMAT = "Mixed"
