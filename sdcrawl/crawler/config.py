"""Typed crawler configuration with JSON/YAML load/save helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml  # type: ignore

from .constants import (
    DEFAULT_DELAY_MS,
    DEFAULT_HTTP_HEADERS,
    DEFAULT_MARKUP_PARSER,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FRONTIER_SIZE,
    DEFAULT_MAX_PAGES,
    DEFAULT_RESPECT_ROBOTS,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_ROBOTS_TIMEOUT_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    JSON_INDENT,
    RECOMMENDED_DELAY_MS,
    RECOMMENDED_MAX_DEPTH,
    RECOMMENDED_MAX_PAGES,
    SUPPORTED_CONFIG_SUFFIXES,
)
from .types import JSONDict


LOGGER = logging.getLogger(__name__)


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid float for '{key}': {value!r}") from exc


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid int for '{key}': {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid int for '{key}': {value!r}") from exc


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"Invalid bool for '{key}': {value!r}")


def _warn_outside(value: int, bounds: tuple[int, int], key: str) -> None:
    low, high = bounds
    if not (low <= value <= high):
        LOGGER.warning("%s=%d is outside the recommended range %d-%d", key, value, low, high)


@dataclass(slots=True)
class CrawlConfig:
    """Options for one crawl run plus fetcher/transport settings."""

    max_pages: int = DEFAULT_MAX_PAGES
    max_depth: int = DEFAULT_MAX_DEPTH
    delay_ms: int = DEFAULT_DELAY_MS
    respect_robots: bool = DEFAULT_RESPECT_ROBOTS

    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    robots_timeout_seconds: float = DEFAULT_ROBOTS_TIMEOUT_SECONDS
    retries: int = DEFAULT_RETRIES
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS
    default_headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HTTP_HEADERS))
    fallback_proxies: list[str] = field(default_factory=list)

    max_frontier_size: int = DEFAULT_MAX_FRONTIER_SIZE
    markup_parser: str = DEFAULT_MARKUP_PARSER

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.robots_timeout_seconds <= 0:
            raise ValueError("robots_timeout_seconds must be > 0")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must be >= 0")
        if self.max_frontier_size < 1:
            raise ValueError("max_frontier_size must be >= 1")

        self.user_agent = (self.user_agent or "").strip()
        if not self.user_agent:
            raise ValueError("user_agent must not be empty")

        self.markup_parser = (self.markup_parser or "").strip() or DEFAULT_MARKUP_PARSER

        for template in self.fallback_proxies:
            if "{url}" not in template:
                raise ValueError(f"fallback proxy template must contain '{{url}}': {template!r}")

        _warn_outside(self.max_pages, RECOMMENDED_MAX_PAGES, "max_pages")
        _warn_outside(self.max_depth, RECOMMENDED_MAX_DEPTH, "max_depth")
        _warn_outside(self.delay_ms, RECOMMENDED_DELAY_MS, "delay_ms")

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0

    def headers(self) -> dict[str, str]:
        """Return request headers with the crawler's user agent applied."""

        merged = dict(self.default_headers)
        merged["User-Agent"] = self.user_agent
        return merged

    def to_dict(self) -> JSONDict:
        """Serialize config for manifests and reproducibility."""

        return {
            "max_pages": self.max_pages,
            "max_depth": self.max_depth,
            "delay_ms": self.delay_ms,
            "respect_robots": self.respect_robots,
            "user_agent": self.user_agent,
            "timeout_seconds": self.timeout_seconds,
            "robots_timeout_seconds": self.robots_timeout_seconds,
            "retries": self.retries,
            "retry_backoff_seconds": self.retry_backoff_seconds,
            "default_headers": dict(self.default_headers),
            "fallback_proxies": list(self.fallback_proxies),
            "max_frontier_size": self.max_frontier_size,
            "markup_parser": self.markup_parser,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CrawlConfig":
        """Build config from a parsed dictionary; missing keys take defaults."""

        return cls(
            max_pages=_as_int(payload.get("max_pages", DEFAULT_MAX_PAGES), "max_pages"),
            max_depth=_as_int(payload.get("max_depth", DEFAULT_MAX_DEPTH), "max_depth"),
            delay_ms=_as_int(payload.get("delay_ms", DEFAULT_DELAY_MS), "delay_ms"),
            respect_robots=_as_bool(
                payload.get("respect_robots", DEFAULT_RESPECT_ROBOTS),
                "respect_robots",
            ),
            user_agent=str(payload.get("user_agent", DEFAULT_USER_AGENT)),
            timeout_seconds=_as_float(
                payload.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
                "timeout_seconds",
            ),
            robots_timeout_seconds=_as_float(
                payload.get("robots_timeout_seconds", DEFAULT_ROBOTS_TIMEOUT_SECONDS),
                "robots_timeout_seconds",
            ),
            retries=_as_int(payload.get("retries", DEFAULT_RETRIES), "retries"),
            retry_backoff_seconds=_as_float(
                payload.get("retry_backoff_seconds", DEFAULT_RETRY_BACKOFF_SECONDS),
                "retry_backoff_seconds",
            ),
            default_headers={
                str(k): str(v)
                for k, v in dict(payload.get("default_headers", DEFAULT_HTTP_HEADERS)).items()
            },
            fallback_proxies=[str(item) for item in list(payload.get("fallback_proxies") or [])],
            max_frontier_size=_as_int(
                payload.get("max_frontier_size", DEFAULT_MAX_FRONTIER_SIZE),
                "max_frontier_size",
            ),
            markup_parser=str(payload.get("markup_parser", DEFAULT_MARKUP_PARSER)),
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML config at {path} must be a mapping at top level")
    return data


def load_config_payload(path: str | Path) -> dict[str, Any]:
    """Read the raw mapping from a JSON/YAML config file."""

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ValueError(
            f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )

    if suffix == ".json":
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    else:
        payload = _load_yaml(config_path)

    if not isinstance(payload, dict):
        raise ValueError(f"Config at {config_path} must be a mapping")
    return payload


def load_config(path: str | Path) -> CrawlConfig:
    """Load CrawlConfig from JSON/YAML path."""

    return CrawlConfig.from_dict(load_config_payload(path))


def save_config(config: CrawlConfig, path: str | Path) -> None:
    """Save CrawlConfig as JSON or YAML based on file extension."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = out_path.suffix.lower()
    payload = config.to_dict()

    if suffix == ".json":
        out_path.write_text(
            json.dumps(payload, indent=JSON_INDENT, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return

    if suffix in {".yaml", ".yml"}:
        out_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        return

    raise ValueError(
        f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
    )


__all__ = [
    "CrawlConfig",
    "load_config",
    "load_config_payload",
    "save_config",
]
