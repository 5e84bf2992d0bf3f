"""Shared fixtures: an in-memory page fetcher and item builders."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from sdcrawl.crawler import CrawlConfig, DataFormat, FetchError, StructuredDataItem
from sdcrawl.crawler.extractors.common import build_item


class FakeFetcher:
    """`PageFetcher` serving pages from a dict; unknown URLs fail with 404."""

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        *,
        robots: str | None = None,
    ) -> None:
        self.pages = dict(pages or {})
        self.robots = robots
        self.calls: list[str] = []
        self.closed = False

    def fetch_text(self, url: str, *, html_only: bool = True) -> str:
        self.calls.append(url)
        if url.endswith("/robots.txt"):
            if self.robots is None:
                raise FetchError(url, "HTTP 404: Not Found", status_code=404)
            return self.robots
        if url not in self.pages:
            raise FetchError(url, "HTTP 404: Not Found", status_code=404)
        return self.pages[url]

    @property
    def page_calls(self) -> list[str]:
        return [url for url in self.calls if not url.endswith("/robots.txt")]

    def close(self) -> None:
        self.closed = True


def page(body: str = "", head: str = "") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


def json_ld(payload: str) -> str:
    return f'<script type="application/ld+json">{payload}</script>'


def make_item(
    data: dict[str, Any],
    *,
    url: str = "https://example.com/",
    data_format: DataFormat = DataFormat.JSON_LD,
    item_type: str | None = None,
) -> StructuredDataItem:
    if item_type is None and isinstance(data.get("@type"), str):
        item_type = data["@type"]
    return build_item(url=url, data_format=data_format, data=data, item_type=item_type)


@pytest.fixture
def fast_config() -> CrawlConfig:
    """Config without politeness delay or robots lookup."""
    return CrawlConfig(delay_ms=0, respect_robots=False)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
