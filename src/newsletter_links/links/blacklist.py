"""Blacklist filtering for newsletter links."""

import logging
from dataclasses import replace
from typing import Sequence

from .models import Newsletter
from .urls import host_matches, parse_url

logger = logging.getLogger(__name__)


def is_blacklisted(url: str, patterns: Sequence[str]) -> bool:
    """
    Check a URL against blacklist patterns.

    Supported patterns:
    - exact URL: "https://example.com/page"
    - wildcard domain: "*.example.com" (the domain and its subdomains)
    - path wildcard: "https://example.com/premium/*"

    Unparseable URLs are never blacklisted.
    """
    try:
        hostname = parse_url(url).hostname
    except ValueError:
        return False

    for pattern in patterns:
        if pattern == url:
            return True
        if pattern.startswith("*.") and host_matches(hostname, pattern[2:]):
            return True
        if pattern.endswith("/*") and url.startswith(pattern[:-2]):
            return True
    return False


def filter_blacklisted(
    newsletters: list[Newsletter], patterns: Sequence[str]
) -> list[Newsletter]:
    """Drop blacklisted raw links and articles from every newsletter."""
    if not patterns:
        return newsletters

    filtered = []
    removed = 0
    for newsletter in newsletters:
        links = [u for u in newsletter.links if not is_blacklisted(u, patterns)]
        articles = [a for a in newsletter.articles if not is_blacklisted(a.url, patterns)]
        dropped = (len(newsletter.links) - len(links)) + (
            len(newsletter.articles) - len(articles)
        )
        if dropped:
            logger.debug(
                "[BLACKLIST] Filtered %d blacklisted URLs from %s",
                dropped,
                newsletter.pattern.name,
            )
        removed += dropped
        filtered.append(replace(newsletter, links=links, articles=articles))

    logger.info("[BLACKLIST] Filtered %d blacklisted URLs", removed)
    return filtered
