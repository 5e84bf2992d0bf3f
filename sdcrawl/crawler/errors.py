"""Exceptions raised across crawler components."""

from __future__ import annotations


class FetchError(Exception):
    """A page (or robots file) could not be fetched as text."""

    def __init__(
        self,
        url: str,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.retryable = retryable


class CrawlSetupError(ValueError):
    """Crawl input cannot be turned into a seedable URL."""


class CrawlCancelled(Exception):
    """Raised inside the crawl loop once cancellation has been requested."""


__all__ = [
    "CrawlCancelled",
    "CrawlSetupError",
    "FetchError",
]
