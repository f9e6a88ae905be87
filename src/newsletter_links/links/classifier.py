"""Link classification for newsletter links.

Every link gets exactly one LinkCategory. Rules are an ordered ladder of
(name, predicate, category) entries; the first matching predicate wins and
anything that matches nothing is kept. Comparisons are on the lower-cased
host, path and query.

Rule order:
1. tracking paths (/open/, /click/, /track/, /api/)
2. configured intermediate domains -> keep (they must be resolved first)
3. social platforms (GitHub repositories excepted)
4. Substack author profiles and bare Substack homepages -> social
5. YouTube
6. downloadable resources -> bonus
7. course platforms / Bookshop.org -> sponsored
8. affiliate / e-mail campaign query strings -> sponsored
9. marketing and account-management hosts or paths -> sponsored
10. sale / promo query terms -> sponsored
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.parse import parse_qsl

from ..config.app_config import AppConfig
from .models import LinkCategory
from .urls import host_matches, parse_url, path_segments

logger = logging.getLogger(__name__)

TRACKING_PATHS = ("/open/", "/click/", "/track/", "/api/")

SOCIAL_DOMAINS = (
    "twitter.com",
    "x.com",
    "mastodon.social",
    "linkedin.com",
    "facebook.com",
    "instagram.com",
    "threads.net",
    "reddit.com",
    "github.com",  # profiles only, repositories are kept
)

YOUTUBE_DOMAINS = ("youtube.com", "youtu.be")

BONUS_EXTENSIONS = (".pdf", ".epub", ".mobi", ".zip", ".ebook")
BONUS_KEYWORDS = ("/ebook", "/whitepaper", "/guide", "/download", "/almanac", "/report")

COURSE_DOMAINS = (
    "frontendmasters.com",
    "udemy.com",
    "coursera.org",
    "pluralsight.com",
    "egghead.io",
    "levelup.video",
)
COURSE_PATHS = ("/courses/", "/learn/", "/course/")
AFFILIATE_DOMAINS = ("bookshop.org",)

MARKETING_HOST_KEYWORDS = (
    "unsubscribe",
    "preferences",
    "manage-subscription",
    "email-settings",
)

MARKETING_PATHS = (
    "/sale",
    "/deals",
    "/discount",
    "/promo",
    "/pricing",
    "/buy",
    "/purchase",
    "/subscribe",
    "/unsubscribe",
    "/preferences",
    "/email-preferences",
    "/manage",
    "/optin",
    "/optout",
    "/signup",
    "/register",
    "/account",
    "/comments",
    "/action/",  # Substack actions
    "/s/",  # Substack sections
)

PROMO_QUERY_TERMS = ("sale", "promo", "discount", "coupon")


@dataclass(frozen=True)
class _Link:
    """Lower-cased pieces of a URL the rules look at."""

    hostname: str
    path: str
    query: str
    segments: tuple[str, ...]
    params: dict[str, str]


Rule = tuple[str, Callable[[_Link], bool], LinkCategory]


def _parse(url: str) -> _Link:
    parts = parse_url(url)
    path = parts.path.lower()
    query = parts.query.lower()
    return _Link(
        hostname=parts.hostname.lower(),
        path=path,
        query=query,
        segments=tuple(path_segments(path)),
        params=dict(parse_qsl(query, keep_blank_values=True)),
    )


def is_intermediate_domain(url: str, intermediate_domains: Sequence[str]) -> bool:
    """
    Check whether a URL is hosted on one of the intermediate domains.

    Patterns match the domain itself and its subdomains; a leading "*." is
    accepted ("*.daily.dev" matches "daily.dev" and "app.daily.dev").
    Unparseable URLs never match.
    """
    try:
        hostname = parse_url(url).hostname
    except ValueError:
        return False
    return _matches_intermediate(hostname, intermediate_domains)


def _matches_intermediate(hostname: str, intermediate_domains: Sequence[str]) -> bool:
    for domain in intermediate_domains:
        domain = domain.lower()
        if domain.startswith("*."):
            domain = domain[2:]
        if host_matches(hostname, domain):
            return True
    return False


def _on_any(link: _Link, domains: Sequence[str]) -> bool:
    return any(host_matches(link.hostname, d) for d in domains)


def _is_tracking(link: _Link) -> bool:
    return any(p in link.path for p in TRACKING_PATHS)


def _is_social(link: _Link) -> bool:
    if not _on_any(link, SOCIAL_DOMAINS):
        return False
    # github.com/user is a profile, github.com/user/repo is content
    if host_matches(link.hostname, "github.com"):
        return len(link.segments) < 2
    return True


def _is_substack_profile(link: _Link) -> bool:
    if not host_matches(link.hostname, "substack.com"):
        return False
    if link.path.startswith("/@"):
        return True
    # Publication homepage rather than a post
    return link.hostname != "substack.com" and not link.segments


def _is_youtube(link: _Link) -> bool:
    return _on_any(link, YOUTUBE_DOMAINS)


def _is_bonus(link: _Link) -> bool:
    if link.path.endswith(BONUS_EXTENSIONS):
        return True
    # Keyword paths only count when they point into a resource directory
    if any(k in link.path for k in BONUS_KEYWORDS):
        return (
            link.path.endswith(".pdf")
            or "/ebooks/" in link.path
            or "/almanac/" in link.path
        )
    return False


def _is_course_or_affiliate(link: _Link) -> bool:
    if _on_any(link, AFFILIATE_DOMAINS):
        return True
    if _on_any(link, COURSE_DOMAINS):
        return any(p in link.path for p in COURSE_PATHS)
    return False


def _has_sponsored_params(link: _Link) -> bool:
    if "ref" in link.params:
        return True
    return link.params.get("utm_source") == "email" and "utm_medium" in link.params


def _is_marketing(link: _Link) -> bool:
    if any(k in link.hostname for k in MARKETING_HOST_KEYWORDS):
        return True
    if any(p in link.path for p in MARKETING_PATHS):
        return True
    return link.hostname == "substack.com" and link.path == "/app"


def _has_promo_query(link: _Link) -> bool:
    return any(term in link.query for term in PROMO_QUERY_TERMS)


def _rules(intermediate_domains: Sequence[str]) -> list[Rule]:
    rules: list[Rule] = [("tracking-path", _is_tracking, LinkCategory.TRACKING)]
    if intermediate_domains:
        rules.append(
            (
                "intermediate-domain",
                lambda link: _matches_intermediate(link.hostname, intermediate_domains),
                LinkCategory.KEEP,
            )
        )
    rules.extend(
        [
            ("social", _is_social, LinkCategory.SOCIAL),
            ("substack-profile", _is_substack_profile, LinkCategory.SOCIAL),
            ("youtube", _is_youtube, LinkCategory.YOUTUBE),
            ("bonus-resource", _is_bonus, LinkCategory.BONUS),
            ("course-or-affiliate", _is_course_or_affiliate, LinkCategory.SPONSORED),
            ("sponsored-params", _has_sponsored_params, LinkCategory.SPONSORED),
            ("marketing", _is_marketing, LinkCategory.SPONSORED),
            ("promo-query", _has_promo_query, LinkCategory.SPONSORED),
        ]
    )
    return rules


def categorize_link(url: str, app_config: Optional[AppConfig] = None) -> LinkCategory:
    """
    Classify a link.

    Args:
        url: Link to classify
        app_config: When given, its intermediate domains are forced to KEEP
            (after the tracking-path rule) so they survive until resolution

    Returns:
        The first matching rule's category, KEEP if none match or the URL
        can't be parsed
    """
    try:
        link = _parse(url)
    except ValueError:
        return LinkCategory.KEEP

    domains = app_config.intermediate_domains() if app_config else ()
    for name, predicate, category in _rules(domains):
        if predicate(link):
            logger.debug("[CLASSIFIER] %s -> %s (%s)", url, category.value, name)
            return category
    return LinkCategory.KEEP
