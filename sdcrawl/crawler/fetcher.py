"""Text fetching over `requests` with retry, HTML checks, and proxy fallbacks."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import requests

from .config import CrawlConfig
from .constants import HTML_CONTENT_TYPES
from .errors import FetchError
from .url import host_from_url


LOGGER = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429})


class PageFetcher(Protocol):
    """Capability consumed by the crawl pipeline: URL in, text out, or FetchError."""

    def fetch_text(self, url: str, *, html_only: bool = True) -> str:
        ...


class FallbackHostCache:
    """Remembers hosts whose direct fetch failed but a fallback worked."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hosts: set[str] = set()

    def needs_fallback(self, host: str) -> bool:
        with self._lock:
            return host in self._hosts

    def remember(self, host: str) -> None:
        with self._lock:
            self._hosts.add(host)

    def clear(self) -> None:
        with self._lock:
            self._hosts.clear()


@dataclass(frozen=True, slots=True)
class _AttemptConfig:
    attempts: int
    backoff_seconds: float


class Fetcher:
    """Default `PageFetcher`: direct request first, then configured fallbacks.

    Fallback templates contain `{url}`, replaced with the percent-encoded
    target URL, and must return the target's body unchanged.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        session: requests.Session | None = None,
        host_cache: FallbackHostCache | None = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.host_cache = host_cache or FallbackHostCache()
        self._attempt_cfg = _AttemptConfig(
            attempts=max(1, config.retries + 1),
            backoff_seconds=max(0.0, config.retry_backoff_seconds),
        )

    def fetch_text(self, url: str, *, html_only: bool = True) -> str:
        """Fetch `url` and return its decoded body.

        Raises FetchError when neither the direct request nor any fallback
        produced an acceptable response.
        """

        host = host_from_url(url)
        timeout = self.config.timeout_seconds if html_only else self.config.robots_timeout_seconds

        direct_error: FetchError | None = None
        if not (self.config.fallback_proxies and self.host_cache.needs_fallback(host)):
            try:
                return self._fetch_with_retries(url, url, html_only=html_only, timeout=timeout)
            except FetchError as exc:
                direct_error = exc
                if not self.config.fallback_proxies:
                    raise
                LOGGER.debug("Direct fetch failed for %s (%s), trying fallbacks", url, exc)

        for template in self.config.fallback_proxies:
            proxied = template.replace("{url}", quote(url, safe=""))
            try:
                text = self._fetch_with_retries(url, proxied, html_only=html_only, timeout=timeout)
            except FetchError as exc:
                LOGGER.debug("Fallback %s failed for %s: %s", template, url, exc)
                continue
            self.host_cache.remember(host)
            return text

        if direct_error is not None:
            raise FetchError(url, f"{direct_error}; all fallbacks failed", status_code=direct_error.status_code)
        raise FetchError(url, "All fallbacks failed")

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _fetch_with_retries(self, url: str, request_url: str, *, html_only: bool, timeout: float) -> str:
        last_error: FetchError | None = None

        for attempt in range(1, self._attempt_cfg.attempts + 1):
            try:
                return self._fetch_once(url, request_url, html_only=html_only, timeout=timeout)
            except FetchError as exc:
                last_error = exc
                if not exc.retryable:
                    raise

            if attempt < self._attempt_cfg.attempts and self._attempt_cfg.backoff_seconds > 0:
                # Linear backoff.
                time.sleep(self._attempt_cfg.backoff_seconds * attempt)

        if last_error is None:
            raise FetchError(url, "Unknown fetch failure")
        raise last_error

    def _fetch_once(self, url: str, request_url: str, *, html_only: bool, timeout: float) -> str:
        try:
            response = self.session.get(
                request_url,
                headers=self.config.headers(),
                timeout=timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            raise FetchError(url, f"{exc.__class__.__name__}: {exc}", retryable=True) from exc

        status = response.status_code
        if not (200 <= status < 300):
            raise FetchError(
                url,
                f"HTTP {status}: {response.reason or ''}".strip(),
                status_code=status,
                retryable=status in RETRYABLE_STATUS_CODES or status >= 500,
            )

        if html_only:
            content_type = (response.headers.get("Content-Type") or "").lower()
            if not any(kind in content_type for kind in HTML_CONTENT_TYPES):
                raise FetchError(url, f"Response is not HTML ({content_type or 'no content type'})")

        if not response.encoding or response.encoding.lower() == "iso-8859-1":
            response.encoding = response.apparent_encoding or "utf-8"
        return response.text


__all__ = [
    "FallbackHostCache",
    "Fetcher",
    "PageFetcher",
]
