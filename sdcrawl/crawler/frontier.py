"""FIFO crawl frontier with visited tracking and a hard size cap."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum

from .constants import DEFAULT_MAX_FRONTIER_SIZE
from .types import FrontierItem


class EnqueueStatus(str, Enum):
    """Result status for frontier enqueue attempts."""

    ENQUEUED = "enqueued"
    SKIPPED_VISITED = "skipped_visited"
    SKIPPED_PENDING = "skipped_pending"
    SKIPPED_FULL = "skipped_full"


@dataclass(frozen=True, slots=True)
class EnqueueResult:
    """Outcome of one enqueue attempt."""

    status: EnqueueStatus
    url: str
    item: FrontierItem | None = None

    @property
    def accepted(self) -> bool:
        return self.status == EnqueueStatus.ENQUEUED


class Frontier:
    """Breadth-first frontier owned by a single crawl invocation.

    - `pop` returns entries strictly in enqueue order.
    - URLs already visited or already waiting are not enqueued again.
    - At most `max_size` entries wait at any time; extra links are dropped.

    URLs are expected to be normalized by the caller.
    """

    def __init__(self, *, max_size: int = DEFAULT_MAX_FRONTIER_SIZE) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be > 0")

        self.max_size = max_size
        self._queue: deque[FrontierItem] = deque()
        self._pending: set[str] = set()
        self._visited: set[str] = set()

        self._enqueued_count = 0
        self._dequeued_count = 0
        self._skipped_visited_count = 0
        self._skipped_pending_count = 0
        self._skipped_full_count = 0

    def seed(self, url: str) -> EnqueueResult:
        """Seed the frontier with a depth-0 URL."""

        return self.push(url, depth=0)

    def push(self, url: str, *, depth: int, referrer: str | None = None) -> EnqueueResult:
        """Attempt to enqueue one URL."""

        if url in self._visited:
            self._skipped_visited_count += 1
            return EnqueueResult(EnqueueStatus.SKIPPED_VISITED, url)

        if url in self._pending:
            self._skipped_pending_count += 1
            return EnqueueResult(EnqueueStatus.SKIPPED_PENDING, url)

        if len(self._queue) >= self.max_size:
            self._skipped_full_count += 1
            return EnqueueResult(EnqueueStatus.SKIPPED_FULL, url)

        item = FrontierItem(url=url, depth=depth, referrer=referrer)
        self._queue.append(item)
        self._pending.add(url)
        self._enqueued_count += 1
        return EnqueueResult(EnqueueStatus.ENQUEUED, url, item)

    def push_many(
        self,
        urls: list[str],
        *,
        depth: int,
        referrer: str | None = None,
    ) -> list[EnqueueResult]:
        """Attempt to enqueue multiple URLs, preserving input order."""

        return [self.push(url, depth=depth, referrer=referrer) for url in urls]

    def pop(self) -> FrontierItem | None:
        """Remove and return the earliest-enqueued entry, or None when empty."""

        if not self._queue:
            return None
        item = self._queue.popleft()
        self._pending.discard(item.url)
        self._dequeued_count += 1
        return item

    def mark_visited(self, *urls: str) -> None:
        for url in urls:
            self._visited.add(url)

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def empty(self) -> bool:
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)

    def snapshot(self) -> dict[str, int]:
        """Return frontier counters for logs/stats reporting."""

        return {
            "queue_size": len(self._queue),
            "visited_urls": len(self._visited),
            "enqueued": self._enqueued_count,
            "dequeued": self._dequeued_count,
            "skipped_visited": self._skipped_visited_count,
            "skipped_pending": self._skipped_pending_count,
            "skipped_full": self._skipped_full_count,
        }


__all__ = [
    "EnqueueResult",
    "EnqueueStatus",
    "Frontier",
]
