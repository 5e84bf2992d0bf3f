"""End-to-end crawl pipeline orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Callable
from urllib.parse import urlsplit, urlunsplit

from .config import CrawlConfig
from .errors import CrawlCancelled, CrawlSetupError, FetchError
from .extractors import StructuredDataExtractor, StructuredDataExtractorConfig, parse_html
from .fetcher import Fetcher, PageFetcher
from .frontier import EnqueueStatus, Frontier
from .robots import RobotsRules, agent_token_from_user_agent, is_allowed, parse_robots_txt
from .stats import SkipReason, StatsCollector
from .types import CrawlOutcome, CrawlStage, CrawlStatus, FrontierItem, StructuredDataItem
from .url import base_url_from_input, extract_canonical_url, extract_links


LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
DataCallback = Callable[[list[StructuredDataItem]], None]


@dataclass(slots=True)
class _CrawlState:
    """Mutable state owned by one `crawl` call."""

    base_url: str
    base_domain: str
    frontier: Frontier
    cancel_event: threading.Event
    robots_rules: RobotsRules = field(default_factory=dict)
    abandoned: set[str] = field(default_factory=set)
    items: list[StructuredDataItem] = field(default_factory=list)
    fetch_attempted: bool = False


@dataclass(frozen=True, slots=True)
class _PageResult:
    url: str
    items: list[StructuredDataItem]


class CrawlPipeline:
    """Breadth-first, single-domain structured-data crawl.

    One page is processed at a time. `status` follows
    `idle -> running -> completed | stopped | error`; every `crawl` call
    starts from fresh visited/frontier state.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        fetcher: PageFetcher | None = None,
        extractor: StructuredDataExtractor | None = None,
        stats: StatsCollector | None = None,
    ) -> None:
        self.config = config

        self.fetcher = fetcher or Fetcher(config)
        self.extractor = extractor or StructuredDataExtractor(
            StructuredDataExtractorConfig(markup_parser=config.markup_parser)
        )
        self.stats = stats or StatsCollector()
        self.status = CrawlStatus.IDLE

        self._owns_fetcher = fetcher is None
        self._injected_stats = stats

    def crawl(
        self,
        domain_input: str,
        *,
        on_progress: ProgressCallback | None = None,
        on_data: DataCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> CrawlOutcome:
        """Crawl the site named by `domain_input` and return the terminal outcome.

        Items are delivered through `on_data` as each page yields them and are
        also kept in the outcome, including when the crawl is stopped or fails.
        """

        if self._injected_stats is None:
            self.stats = StatsCollector()
        self.status = CrawlStatus.RUNNING
        started = time.monotonic()

        state: _CrawlState | None = None
        base_url: str | None = None
        error_message: str | None = None

        try:
            base_url, base_domain = base_url_from_input(domain_input)
            state = _CrawlState(
                base_url=base_url,
                base_domain=base_domain,
                frontier=Frontier(max_size=self.config.max_frontier_size),
                cancel_event=cancel_event or threading.Event(),
            )
            LOGGER.info(
                "Starting crawl of %s (max_pages=%d, max_depth=%d, delay_ms=%d, robots=%s)",
                base_url,
                self.config.max_pages,
                self.config.max_depth,
                self.config.delay_ms,
                self.config.respect_robots,
            )
            self._run(state, on_progress=on_progress, on_data=on_data)
            status = CrawlStatus.COMPLETED
        except CrawlSetupError as exc:
            LOGGER.error("Cannot start crawl: %s", exc)
            self.stats.record_exception(CrawlStage.SETUP, str(domain_input), exc)
            status = CrawlStatus.ERROR
            error_message = str(exc)
        except CrawlCancelled:
            LOGGER.info("Crawl of %s cancelled", base_url)
            status = CrawlStatus.STOPPED
        except Exception as exc:
            LOGGER.exception("Crawl of %s failed", base_url or domain_input)
            status = CrawlStatus.ERROR
            error_message = f"{exc.__class__.__name__}: {exc}"

        if state is not None:
            self.stats.record_frontier_snapshot(state.frontier.snapshot())
        self.stats.finish()
        self.status = status

        outcome = CrawlOutcome(
            status=status,
            base_url=base_url,
            stats=self.stats.core(),
            duration_seconds=time.monotonic() - started,
            items=list(state.items) if state is not None else [],
            errors=self.stats.errors(),
            error=error_message,
        )
        LOGGER.info(
            "Crawl %s: %d page(s), %d item(s), %d error(s) in %.1fs",
            status.value,
            outcome.pages_crawled,
            outcome.structured_data_found,
            len(outcome.errors),
            outcome.duration_seconds,
        )
        return outcome

    def close(self) -> None:
        if self._owns_fetcher and isinstance(self.fetcher, Fetcher):
            self.fetcher.close()

    def __enter__(self) -> "CrawlPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run(
        self,
        state: _CrawlState,
        *,
        on_progress: ProgressCallback | None,
        on_data: DataCallback | None,
    ) -> None:
        self.stats.record_enqueue(state.frontier.seed(state.base_url))

        if self.config.respect_robots:
            state.robots_rules = self._load_robots(state.base_url)

        while not state.frontier.empty() and self.stats.core().pages_crawled < self.config.max_pages:
            if state.cancel_event.is_set():
                raise CrawlCancelled()

            entry = state.frontier.pop()
            if entry is None:
                break

            page = self._process_entry(state, entry)
            if page is None:
                continue

            if page.items:
                state.items.extend(page.items)
                if on_data is not None:
                    on_data(list(page.items))

            if on_progress is not None:
                core = self.stats.core()
                on_progress(core.pages_crawled, core.structured_data_found)

    def _process_entry(self, state: _CrawlState, entry: FrontierItem) -> _PageResult | None:
        url = entry.url

        if state.frontier.is_visited(url) or url in state.abandoned:
            LOGGER.debug("Skipping visited %s", url)
            self.stats.record_skip(SkipReason.VISITED)
            return None

        if entry.depth > self.config.max_depth:
            LOGGER.debug("Skipping %s at depth %d > %d", url, entry.depth, self.config.max_depth)
            self.stats.record_skip(SkipReason.DEPTH)
            return None

        if not is_allowed(url, state.robots_rules):
            LOGGER.debug("Skipping %s disallowed by robots.txt", url)
            self.stats.record_skip(SkipReason.ROBOTS)
            return None

        if state.fetch_attempted and self.config.delay_ms > 0:
            if state.cancel_event.wait(self.config.delay_seconds):
                # Observed at the top of the loop.
                return None
        state.fetch_attempted = True

        try:
            html = self.fetcher.fetch_text(url, html_only=True)
        except FetchError as exc:
            LOGGER.warning("Failed to fetch %s: %s", url, exc)
            self.stats.record_exception(CrawlStage.FETCH, url, exc)
            state.abandoned.add(url)
            return None

        try:
            return self._handle_page(state, entry, html)
        except Exception as exc:
            LOGGER.exception("Unexpected error while processing %s", url)
            self.stats.record_exception(CrawlStage.EXTRACT, url, exc)
            state.abandoned.add(url)
            return None

    def _handle_page(self, state: _CrawlState, entry: FrontierItem, html: str) -> _PageResult | None:
        soup = parse_html(html, self.config.markup_parser)

        canonical_url = extract_canonical_url(soup, entry.url, base_domain=state.base_domain)
        if canonical_url != entry.url and state.frontier.is_visited(canonical_url):
            LOGGER.debug("Skipping %s: canonical %s already crawled", entry.url, canonical_url)
            self.stats.record_skip(SkipReason.CANONICAL)
            state.frontier.mark_visited(entry.url)
            return None

        state.frontier.mark_visited(entry.url, canonical_url)
        self.stats.record_page()

        items = self.extractor.extract_from_soup(soup, canonical_url)
        self.stats.record_items(items)
        if items:
            LOGGER.debug("Extracted %d item(s) from %s", len(items), canonical_url)

        if entry.depth < self.config.max_depth:
            links = extract_links(soup, base_url=entry.url, base_domain=state.base_domain)
            results = state.frontier.push_many(links, depth=entry.depth + 1, referrer=canonical_url)
            self.stats.record_enqueue_many(results)
            dropped = sum(1 for result in results if result.status == EnqueueStatus.SKIPPED_FULL)
            if dropped:
                LOGGER.debug("Frontier full, dropped %d link(s) from %s", dropped, entry.url)

        return _PageResult(url=canonical_url, items=items)

    def _load_robots(self, base_url: str) -> RobotsRules:
        parsed = urlsplit(base_url)
        robots_url = urlunsplit((parsed.scheme, parsed.netloc, "/robots.txt", "", ""))

        try:
            text = self.fetcher.fetch_text(robots_url, html_only=False)
        except FetchError as exc:
            LOGGER.warning("Could not load %s, crawling without robots rules: %s", robots_url, exc)
            self.stats.record_exception(CrawlStage.ROBOTS, robots_url, exc)
            return {}

        rules = parse_robots_txt(text, agent_token=agent_token_from_user_agent(self.config.user_agent))
        LOGGER.info("Loaded %d robots rule(s) from %s", len(rules), robots_url)
        return rules


__all__ = [
    "CrawlPipeline",
    "DataCallback",
    "ProgressCallback",
]
