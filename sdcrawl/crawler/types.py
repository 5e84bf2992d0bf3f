"""Core type definitions for the crawler.

This module is intentionally dependency-light so extractors, the pipeline, and
the grouping package can share records without introducing cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONDict = dict[str, JSONValue]


class DataFormat(str, Enum):
    """Structured-data syntaxes recognised by the extractors."""

    JSON_LD = "JSON-LD"
    MICRODATA = "Microdata"
    RDFA = "RDFa"
    OPENGRAPH = "OpenGraph"
    TWITTER_CARDS = "Twitter Cards"


class CrawlStatus(str, Enum):
    """Lifecycle of one crawl invocation."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    ERROR = "error"


class CrawlStage(str, Enum):
    """Pipeline stage names for error reporting."""

    SETUP = "setup"
    ROBOTS = "robots"
    FETCH = "fetch"
    EXTRACT = "extract"


def utc_now_iso() -> str:
    """Return an RFC3339-like UTC timestamp string for exports."""

    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True, slots=True)
class StructuredDataItem:
    """One occurrence of structured data on one page."""

    url: str
    format: DataFormat
    data: JSONDict
    hash: str
    type: str | None = None
    id: str | None = None

    def to_json(self) -> JSONDict:
        return {
            "url": self.url,
            "format": self.format.value,
            "type": self.type,
            "data": self.data,
            "id": self.id,
            "hash": self.hash,
        }


@dataclass(frozen=True, slots=True)
class FrontierItem:
    """A crawl candidate waiting in the frontier."""

    url: str
    depth: int
    referrer: str | None = None


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    """One recoverable per-page (or setup) failure."""

    stage: CrawlStage
    url: str
    message: str
    error_type: str | None = None
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_exception(
        cls,
        *,
        stage: CrawlStage,
        url: str,
        exc: BaseException,
    ) -> "ErrorRecord":
        return cls(
            stage=stage,
            url=url,
            message=str(exc),
            error_type=exc.__class__.__name__,
        )

    def to_json(self) -> JSONDict:
        return {
            "stage": self.stage.value,
            "url": self.url,
            "message": self.message,
            "error_type": self.error_type,
            "created_at": self.created_at,
        }


@dataclass(slots=True)
class CrawlStats:
    """Counters reported to the progress callback and kept in the outcome."""

    pages_crawled: int = 0
    structured_data_found: int = 0

    pages_fetch_failed: int = 0
    skipped_visited: int = 0
    skipped_depth: int = 0
    skipped_robots: int = 0
    skipped_canonical: int = 0
    links_enqueued: int = 0
    links_dropped_frontier_full: int = 0

    started_at: str = field(default_factory=utc_now_iso)
    finished_at: str | None = None

    def finish(self) -> None:
        self.finished_at = utc_now_iso()

    def to_json(self) -> JSONDict:
        return {
            "pages_crawled": self.pages_crawled,
            "structured_data_found": self.structured_data_found,
            "pages_fetch_failed": self.pages_fetch_failed,
            "skipped_visited": self.skipped_visited,
            "skipped_depth": self.skipped_depth,
            "skipped_robots": self.skipped_robots,
            "skipped_canonical": self.skipped_canonical,
            "links_enqueued": self.links_enqueued,
            "links_dropped_frontier_full": self.links_dropped_frontier_full,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


@dataclass(slots=True)
class CrawlOutcome:
    """Terminal result of one crawl invocation.

    `items` holds every item already delivered through the data callback, so
    partial results survive cancellation and errors.
    """

    status: CrawlStatus
    base_url: str | None
    stats: CrawlStats
    duration_seconds: float = 0.0
    items: list[StructuredDataItem] = field(default_factory=list)
    errors: list[ErrorRecord] = field(default_factory=list)
    error: str | None = None

    @property
    def pages_crawled(self) -> int:
        return self.stats.pages_crawled

    @property
    def structured_data_found(self) -> int:
        return self.stats.structured_data_found

    def to_json(self) -> JSONDict:
        return {
            "status": self.status.value,
            "base_url": self.base_url,
            "duration_seconds": self.duration_seconds,
            "stats": self.stats.to_json(),
            "errors": [error.to_json() for error in self.errors],
            "error": self.error,
        }


__all__ = [
    "CrawlOutcome",
    "CrawlStage",
    "CrawlStats",
    "CrawlStatus",
    "DataFormat",
    "ErrorRecord",
    "FrontierItem",
    "JSONDict",
    "JSONPrimitive",
    "JSONValue",
    "StructuredDataItem",
    "utc_now_iso",
]
