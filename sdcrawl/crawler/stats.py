"""Thread-safe crawl statistics aggregation utilities."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
import threading
from typing import Any, Mapping

from .frontier import EnqueueResult, EnqueueStatus
from .types import CrawlStage, CrawlStats, DataFormat, ErrorRecord, StructuredDataItem


class SkipReason:
    """Names of frontier entries dropped by the crawl loop."""

    VISITED = "visited"
    DEPTH = "depth"
    ROBOTS = "robots"
    CANONICAL = "canonical"


class StatsCollector:
    """Collect and summarize crawler runtime statistics.

    The crawl loop is sequential, but `core()`/`to_json()` may be read from
    another thread while a crawl is in progress.
    """

    def __init__(self, base: CrawlStats | None = None) -> None:
        self._lock = threading.Lock()
        self._core = base or CrawlStats()

        self._frontier_extra: dict[str, int] = defaultdict(int)
        self._frontier_snapshot: dict[str, int] = {}

        self._items_by_format: dict[str, int] = defaultdict(int)
        self._items_by_type: dict[str, int] = defaultdict(int)
        self._error_stage_counts: dict[str, int] = defaultdict(int)
        self._errors: list[ErrorRecord] = []

    def record_enqueue(self, result_or_status: EnqueueResult | EnqueueStatus) -> None:
        """Record one frontier enqueue outcome."""

        if isinstance(result_or_status, EnqueueResult):
            status = result_or_status.status
        else:
            status = result_or_status

        with self._lock:
            if status == EnqueueStatus.ENQUEUED:
                self._core.links_enqueued += 1
                return
            if status == EnqueueStatus.SKIPPED_FULL:
                self._core.links_dropped_frontier_full += 1
                return

            # Already visited or already waiting; not a crawl-loop skip.
            self._frontier_extra[status.value] += 1

    def record_enqueue_many(
        self, results: list[EnqueueResult] | tuple[EnqueueResult, ...]
    ) -> None:
        """Record many enqueue outcomes."""

        for result in results:
            self.record_enqueue(result)

    def record_frontier_snapshot(self, snapshot: Mapping[str, int]) -> None:
        """Attach latest frontier snapshot for diagnostics."""

        with self._lock:
            self._frontier_snapshot = dict(snapshot)

    def record_skip(self, reason: str) -> None:
        """Record one frontier entry dropped by the crawl loop."""

        with self._lock:
            if reason == SkipReason.VISITED:
                self._core.skipped_visited += 1
            elif reason == SkipReason.DEPTH:
                self._core.skipped_depth += 1
            elif reason == SkipReason.ROBOTS:
                self._core.skipped_robots += 1
            elif reason == SkipReason.CANONICAL:
                self._core.skipped_canonical += 1
            else:
                raise ValueError(f"Unknown skip reason: {reason!r}")

    def record_page(self) -> None:
        """Record one page counted against the page budget."""

        with self._lock:
            self._core.pages_crawled += 1

    def record_items(self, items: list[StructuredDataItem]) -> None:
        """Record items extracted from one page."""

        if not items:
            return
        with self._lock:
            self._core.structured_data_found += len(items)
            for item in items:
                fmt = item.format.value if isinstance(item.format, DataFormat) else str(item.format)
                self._items_by_format[fmt] += 1
                self._items_by_type[item.type or "Unknown"] += 1

    def record_error(self, error: ErrorRecord) -> None:
        """Keep one recoverable error record."""

        with self._lock:
            if error.stage == CrawlStage.FETCH:
                self._core.pages_fetch_failed += 1
            self._error_stage_counts[error.stage.value] += 1
            self._errors.append(error)

    def record_exception(self, stage: CrawlStage, url: str, exc: BaseException) -> ErrorRecord:
        """Build and keep an error record from an exception."""

        error = ErrorRecord.from_exception(stage=stage, url=url, exc=exc)
        self.record_error(error)
        return error

    def finish(self) -> None:
        """Mark crawl as finished."""

        with self._lock:
            self._core.finish()

    def core(self) -> CrawlStats:
        """Return a copy of the core `CrawlStats` record."""

        with self._lock:
            return replace(self._core)

    def errors(self) -> list[ErrorRecord]:
        """Return a copy of recorded errors, oldest first."""

        with self._lock:
            return list(self._errors)

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-serializable summary payload."""

        with self._lock:
            core = self._core.to_json()

            start = _parse_iso_utc(self._core.started_at)
            end = _parse_iso_utc(self._core.finished_at) if self._core.finished_at else datetime.now(
                timezone.utc
            )
            duration_seconds = max(0.0, (end - start).total_seconds())

            return {
                **core,
                "duration_seconds": duration_seconds,
                "throughput": {
                    "pages_per_second": (
                        self._core.pages_crawled / duration_seconds if duration_seconds > 0 else 0.0
                    ),
                },
                "frontier": {
                    "extra_status_counts": dict(self._frontier_extra),
                    "snapshot": dict(self._frontier_snapshot),
                },
                "items": {
                    "by_format": dict(self._items_by_format),
                    "by_type": dict(self._items_by_type),
                },
                "errors": {
                    "by_stage": dict(self._error_stage_counts),
                    "total": len(self._errors),
                },
            }


def _parse_iso_utc(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


__all__ = [
    "SkipReason",
    "StatsCollector",
]
