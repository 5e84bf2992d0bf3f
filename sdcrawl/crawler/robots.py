"""Minimal robots.txt support: path-prefix Allow/Disallow rules for one agent.

Only `User-agent`, `Allow` and `Disallow` lines are interpreted. Rules are kept
in parse order and the first rule whose prefix matches the URL path decides;
this is not longest-match semantics.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from .constants import ROBOTS_AGENT_TOKEN


LOGGER = logging.getLogger(__name__)

# Path prefix -> allowed. dict preserves insertion (parse) order.
RobotsRules = dict[str, bool]


def _is_relevant_agent(agent: str, agent_token: str) -> bool:
    agent = agent.strip().lower()
    return agent in {"", "*"} or agent_token.lower() in agent


def parse_robots_txt(robots_text: str, *, agent_token: str = ROBOTS_AGENT_TOKEN) -> RobotsRules:
    """Parse robots.txt text into an ordered prefix -> allowed mapping."""

    rules: RobotsRules = {}
    relevant = False

    for line in (robots_text or "").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        directive, _, value = stripped.partition(":")
        directive = directive.strip().lower()
        value = value.strip()

        if directive == "user-agent":
            relevant = _is_relevant_agent(value, agent_token)
            continue

        if not relevant:
            continue

        if directive == "disallow":
            # Empty Disallow means allow everything; record nothing.
            if value:
                rules[value] = False
        elif directive == "allow":
            rules[value] = True

    LOGGER.debug("Parsed %d robots rule(s)", len(rules))
    return rules


def is_allowed(url: str, rules: RobotsRules) -> bool:
    """Return whether `url` may be crawled under `rules`.

    No rules means allow; a URL that cannot be parsed is denied.
    """

    if not rules:
        return True

    try:
        parsed = urlsplit(url)
    except ValueError:
        return False
    if not parsed.scheme or not parsed.netloc:
        return False

    path = parsed.path or "/"
    for prefix, allowed in rules.items():
        if path.startswith(prefix):
            return allowed
    return True


def agent_token_from_user_agent(user_agent: str) -> str:
    """Derive the robots matching token (`Name/1.0 (...)` -> `name`)."""

    product = (user_agent or "").strip().split(" ", 1)[0]
    token = product.split("/", 1)[0].strip().lower()
    return token or ROBOTS_AGENT_TOKEN


__all__ = [
    "RobotsRules",
    "agent_token_from_user_agent",
    "is_allowed",
    "parse_robots_txt",
]
