"""CLI entrypoint for structured-data crawls."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import signal
import sys
import threading
from typing import Any

if __package__ in {None, ""}:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from tqdm import tqdm

from sdcrawl.crawler import CrawlConfig, CrawlOutcome, CrawlPipeline, CrawlStatus
from sdcrawl.crawler.config import load_config_payload
from sdcrawl.grouping import (
    ItemFilter,
    ResultCollector,
    default_export_filename,
    unique_formats,
    unique_types,
    write_export,
    write_json,
)


CRAWL_REPORT_FILENAME = "crawl_report.json"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl one site and collect its JSON-LD, Microdata, RDFa, OpenGraph and Twitter Card data.",
    )

    parser.add_argument(
        "--domain",
        type=str,
        default=None,
        help="Site to crawl (example.com or a URL). Required unless the config sets `domain`.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to JSON/YAML crawl config.",
    )
    parser.add_argument(
        "--output_dir",
        type=Path,
        default=Path("structured_data_output"),
        help="Directory for the export JSON and logs.",
    )

    parser.add_argument("--max_pages", type=int, default=None)
    parser.add_argument("--max_depth", type=int, default=None)
    parser.add_argument("--delay_ms", type=int, default=None)
    parser.add_argument(
        "--respect_robots",
        dest="respect_robots",
        action="store_true",
        default=None,
        help="Respect robots.txt (default comes from config).",
    )
    parser.add_argument(
        "--no_respect_robots",
        dest="respect_robots",
        action="store_false",
        help="Ignore robots.txt.",
    )

    parser.add_argument("--user_agent", type=str, default=None)
    parser.add_argument("--timeout_seconds", type=float, default=None)
    parser.add_argument("--retries", type=int, default=None)
    parser.add_argument(
        "--fallback_proxy",
        action="append",
        default=[],
        help="Fallback fetch URL template containing {url} (repeatable). Overrides config if provided.",
    )

    parser.add_argument("--search", type=str, default="", help="Only export items matching this text.")
    parser.add_argument("--type", dest="item_type", type=str, default="all", help="Only export this item type.")
    parser.add_argument(
        "--format",
        dest="item_format",
        type=str,
        default="all",
        help="Only export this format (JSON-LD, Microdata, RDFa, OpenGraph, Twitter Cards).",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> tuple[CrawlConfig, str]:
    """Merge config file values and CLI overrides; return (config, domain)."""

    payload: dict[str, Any] = load_config_payload(args.config) if args.config is not None else {}

    domain = args.domain or payload.pop("domain", None)
    if not domain:
        raise ValueError("No domain provided. Use --domain or set `domain` in the config.")

    if args.max_pages is not None:
        payload["max_pages"] = args.max_pages
    if args.max_depth is not None:
        payload["max_depth"] = args.max_depth
    if args.delay_ms is not None:
        payload["delay_ms"] = args.delay_ms
    if args.respect_robots is not None:
        payload["respect_robots"] = args.respect_robots

    if args.user_agent is not None:
        payload["user_agent"] = args.user_agent
    if args.timeout_seconds is not None:
        payload["timeout_seconds"] = args.timeout_seconds
    if args.retries is not None:
        payload["retries"] = args.retries
    if args.fallback_proxy:
        payload["fallback_proxies"] = list(args.fallback_proxy)

    return CrawlConfig.from_dict(payload), str(domain)


def setup_logging(output_dir: Path, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO

    log_dir = output_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "crawl.log"

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # urllib3 logs every connection at DEBUG.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def print_summary(
    outcome: CrawlOutcome,
    details: dict[str, Any],
    collector: ResultCollector,
    export_path: Path | None,
) -> None:
    items = collector.items
    snippets = collector.snippets

    print("\n=== Crawl Finished ===")
    print(f"status: {outcome.status.value}")
    print(f"base_url: {outcome.base_url}")
    if outcome.error:
        print(f"error: {outcome.error}")
    if export_path is not None:
        print(f"export: {export_path}")

    print("\n--- Core Stats ---")
    stats = outcome.stats.to_json()
    for key in [
        "pages_crawled",
        "structured_data_found",
        "pages_fetch_failed",
        "skipped_visited",
        "skipped_depth",
        "skipped_robots",
        "skipped_canonical",
        "links_enqueued",
        "links_dropped_frontier_full",
    ]:
        print(f"{key}: {stats[key]}")
    print(f"duration_seconds: {outcome.duration_seconds:.1f}")

    print("\n--- Results ---")
    print(f"items: {len(items)}")
    print(f"snippets: {len(snippets)}")
    print(f"connections: {sum(len(snippet.connections) for snippet in snippets)}")
    print(f"types: {json.dumps(unique_types(items))}")
    print(f"formats: {json.dumps(unique_formats(items))}")

    print("\n--- Breakdown ---")
    for fmt, count in sorted(details["items"]["by_format"].items()):
        print(f"{fmt}: {count}")
    for stage, count in sorted(details["errors"]["by_stage"].items()):
        print(f"errors[{stage}]: {count}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.output_dir, verbose=args.verbose)

    try:
        config, domain = build_config(args)
    except Exception as exc:
        logging.error("Failed to build config: %s", exc)
        return 2

    collector = ResultCollector()
    cancel_event = threading.Event()

    def _request_stop(signum, frame) -> None:
        if cancel_event.is_set():
            raise KeyboardInterrupt
        logging.warning("Stop requested, finishing current page (Ctrl-C again to abort)")
        cancel_event.set()

    progress = tqdm(total=config.max_pages, desc="Crawling", unit="page")

    def _on_progress(pages_crawled: int, structured_data_found: int) -> None:
        collector.on_progress(pages_crawled, structured_data_found)
        progress.update(pages_crawled - progress.n)
        progress.set_postfix(items=structured_data_found)

    previous_handler = signal.signal(signal.SIGINT, _request_stop)
    try:
        with CrawlPipeline(config) as pipeline:
            outcome = pipeline.crawl(
                domain,
                on_progress=_on_progress,
                on_data=collector.on_data,
                cancel_event=cancel_event,
            )
            details = pipeline.stats.to_json()
    except KeyboardInterrupt:
        logging.error("Interrupted by user")
        return 130
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        progress.close()

    export_path: Path | None = None
    if outcome.status != CrawlStatus.ERROR or collector.items:
        item_filter = ItemFilter(
            search_term=args.search,
            item_type=args.item_type,
            item_format=args.item_format,
        )
        try:
            export_path = write_export(
                collector.snapshot(item_filter),
                args.output_dir / default_export_filename(),
            )
        except OSError:
            logging.exception("Failed to write export")
            return 1

    try:
        write_json({**outcome.to_json(), "details": details}, args.output_dir / CRAWL_REPORT_FILENAME)
    except OSError:
        logging.exception("Failed to write crawl report")
        return 1

    print_summary(outcome, details, collector, export_path)
    return 1 if outcome.status == CrawlStatus.ERROR else 0


if __name__ == "__main__":
    raise SystemExit(main())
