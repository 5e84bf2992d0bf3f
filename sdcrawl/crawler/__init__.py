"""Crawler package: config, shared types, and pipeline components."""

from .config import CrawlConfig, load_config, save_config
from .errors import CrawlCancelled, CrawlSetupError, FetchError
from .extractors import (
    StructuredDataExtractor,
    StructuredDataExtractorConfig,
    content_hash,
    extract_structured_data,
)
from .fetcher import FallbackHostCache, Fetcher, PageFetcher
from .frontier import EnqueueResult, EnqueueStatus, Frontier
from .pipeline import CrawlPipeline
from .robots import RobotsRules, is_allowed, parse_robots_txt
from .stats import StatsCollector
from .types import (
    CrawlOutcome,
    CrawlStage,
    CrawlStats,
    CrawlStatus,
    DataFormat,
    ErrorRecord,
    FrontierItem,
    StructuredDataItem,
    utc_now_iso,
)
from .url import (
    base_url_from_input,
    extract_canonical_url,
    extract_links,
    host_from_url,
    is_same_domain,
    normalize_domain,
    normalize_url,
    resolve_url,
)

__all__ = [
    "CrawlCancelled",
    "CrawlConfig",
    "CrawlOutcome",
    "CrawlPipeline",
    "CrawlSetupError",
    "CrawlStage",
    "CrawlStats",
    "CrawlStatus",
    "DataFormat",
    "EnqueueResult",
    "EnqueueStatus",
    "ErrorRecord",
    "FallbackHostCache",
    "FetchError",
    "Fetcher",
    "Frontier",
    "FrontierItem",
    "PageFetcher",
    "RobotsRules",
    "StatsCollector",
    "StructuredDataExtractor",
    "StructuredDataExtractorConfig",
    "StructuredDataItem",
    "base_url_from_input",
    "content_hash",
    "extract_canonical_url",
    "extract_links",
    "extract_structured_data",
    "host_from_url",
    "is_allowed",
    "is_same_domain",
    "load_config",
    "normalize_domain",
    "normalize_url",
    "parse_robots_txt",
    "resolve_url",
    "save_config",
    "utc_now_iso",
]
