"""URL normalization, same-domain scoping, and link/canonical discovery."""

from __future__ import annotations

import logging
import re
from urllib.parse import SplitResult, parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag

from .errors import CrawlSetupError


LOGGER = logging.getLogger(__name__)

SKIP_HREF_PREFIXES = ("#", "javascript:", "mailto:", "tel:", "data:")
SECURE_SCHEME = "https"
_VALID_HOST = re.compile(r"^[a-z0-9.\-\[\]:_]+$")


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def normalize_domain(domain_or_url: str) -> str:
    """Normalize a domain (or URL containing one) for matching.

    This strips `www.` and leading/trailing dots and lowercases the host.
    """

    raw = (domain_or_url or "").strip().lower()
    if not raw:
        return ""

    try:
        parsed = urlsplit(raw if "://" in raw else f"//{raw}")
        host = (parsed.hostname or "").strip().lower()
    except ValueError:
        return ""
    return _strip_www(host).strip(".")


def host_from_url(url: str) -> str:
    """Extract the `www.`-stripped, lowercased host from a URL."""

    try:
        host = (urlsplit(url).hostname or "").strip().lower()
    except ValueError:
        return ""
    return _strip_www(host).strip(".")


def _has_default_port(scheme: str, port: int | None) -> bool:
    if port is None:
        return False
    return (scheme == "http" and port == 80) or (scheme == "https" and port == 443)


def _normalize_netloc(parsed_url: SplitResult, scheme: str) -> str:
    host = _strip_www((parsed_url.hostname or "").lower())
    if ":" in host:
        host = f"[{host}]"

    # Userinfo is kept as written; it is already percent-encoded.
    userinfo, at, _ = parsed_url.netloc.rpartition("@")
    userinfo = userinfo + at

    # Raises ValueError for out-of-range ports; callers treat that as unparseable.
    port = parsed_url.port
    if port is not None and not _has_default_port(scheme, port):
        return f"{userinfo}{host}:{port}"
    return f"{userinfo}{host}"


def _normalize_path(path: str) -> str:
    """`""` and `/` become `/`; otherwise one trailing `/` is dropped."""

    if path in ("", "/"):
        return "/"
    return path[:-1] if path.endswith("/") else path


def _normalize_query(query: str) -> str:
    if not query:
        return ""

    pairs = parse_qsl(query, keep_blank_values=True)
    # Stable: values sharing a key keep their relative order.
    pairs.sort(key=lambda item: item[0])
    return urlencode(pairs)


def normalize_url(url: str, pinned_domain: str | None = None) -> str:
    """Canonicalize a URL for identity comparison and dedup.

    Unparseable input (including relative references) is returned unchanged.
    When `pinned_domain` is given and the URL is on that domain (with or
    without `www.`), the scheme is forced to https.
    """

    raw = (url or "").strip()
    try:
        parsed = urlsplit(raw)
        if not parsed.scheme or not parsed.netloc or not parsed.hostname:
            return url

        scheme = parsed.scheme.lower()
        host = parsed.hostname.lower()
        if pinned_domain:
            pinned = pinned_domain.strip().lower()
            if host == pinned or host == f"www.{pinned}":
                scheme = SECURE_SCHEME

        netloc = _normalize_netloc(parsed, scheme)
    except ValueError:
        return url

    path = _normalize_path(parsed.path)
    query = _normalize_query(parsed.query)
    return urlunsplit((scheme, netloc, path, query, ""))


def base_url_from_input(domain_input: str) -> tuple[str, str]:
    """Turn user input (`example.com`, `http://www.example.com/x`) into a seed.

    Returns `(base_url, base_domain)`; the base URL always uses https and has
    `www.` stripped.
    """

    raw = (domain_input or "").strip()
    if not raw:
        raise CrawlSetupError("Domain input is empty")

    candidate = raw if re.match(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://", raw) else f"https://{raw}"
    base_domain = host_from_url(candidate)
    if not base_domain or not _VALID_HOST.match(base_domain):
        raise CrawlSetupError(f"Cannot derive a domain from input: {domain_input!r}")

    base_url = normalize_url(candidate, pinned_domain=base_domain)
    if not base_url.startswith(f"{SECURE_SCHEME}://"):
        raise CrawlSetupError(f"Cannot build a seed URL from input: {domain_input!r}")
    return base_url, base_domain


def is_same_domain(url: str, base_domain: str) -> bool:
    """Return True if URL's host equals `base_domain` after `www.` stripping."""

    host = host_from_url(url)
    return bool(host) and host == normalize_domain(base_domain)


def resolve_url(base_url: str, href: str | None, *, pinned_domain: str | None = None) -> str | None:
    """Resolve a possibly relative link and normalize it.

    Returns None for anchors, non-navigable schemes, and unresolvable links.
    """

    if href is None:
        return None

    candidate = href.strip()
    if not candidate:
        return None

    lowered = candidate.lower()
    if any(lowered.startswith(prefix) for prefix in SKIP_HREF_PREFIXES):
        return None

    try:
        absolute = urljoin(base_url, candidate)
    except ValueError:
        LOGGER.debug("Skipping unresolvable link %r on %s", href, base_url)
        return None

    normalized = normalize_url(absolute, pinned_domain=pinned_domain)
    if urlsplit(normalized).scheme not in {"http", "https"}:
        return None
    return normalized


def extract_links(soup: BeautifulSoup, *, base_url: str, base_domain: str) -> list[str]:
    """Extract normalized same-domain links from anchor tags.

    Returns links in document order with duplicates removed.
    """

    out: list[str] = []
    seen: set[str] = set()

    for element in soup.find_all("a", href=True):
        resolved = resolve_url(base_url, element.get("href"), pinned_domain=base_domain)
        if not resolved or not is_same_domain(resolved, base_domain):
            continue
        if resolved in seen:
            continue
        seen.add(resolved)
        out.append(resolved)

    return out


def _is_canonical_link(tag: Tag) -> bool:
    if tag.name != "link" or not tag.get("href"):
        return False
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return any(value.lower() == "canonical" for value in rel)


def extract_canonical_url(soup: BeautifulSoup, current_url: str, *, base_domain: str) -> str:
    """Return the page's declared canonical URL, or the current URL.

    Canonical links pointing off the crawl domain are ignored.
    """

    fallback = normalize_url(current_url, pinned_domain=base_domain)

    tag = soup.find(_is_canonical_link)
    if tag is None:
        return fallback

    canonical = resolve_url(current_url, tag.get("href"), pinned_domain=base_domain)
    if canonical is None:
        return fallback

    if not is_same_domain(canonical, base_domain):
        LOGGER.debug("Ignoring off-domain canonical %s for %s", canonical, current_url)
        return fallback
    return canonical


__all__ = [
    "SKIP_HREF_PREFIXES",
    "base_url_from_input",
    "extract_canonical_url",
    "extract_links",
    "host_from_url",
    "is_same_domain",
    "normalize_domain",
    "normalize_url",
    "resolve_url",
]
