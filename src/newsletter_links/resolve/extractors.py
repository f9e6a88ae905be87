"""Find the real article URL inside an intermediate HTML page.

Two extraction modes:
- meta tags (og:url, canonical, article:url, twitter:url), with a fallback to
  common "external article link" anchors
- a caller-supplied CSS selector

Both return None rather than raising when the page can't be fetched or holds
nothing useful.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import urljoin, urlsplit

import httpx
from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from ..config.settings import settings
from .http import FETCH_ERRORS, HTML_ACCEPT, client_scope, default_headers

logger = logging.getLogger(__name__)

# (selector, attribute, label) in priority order
META_SELECTORS = (
    ('meta[property="og:url"]', "content", "og:url"),
    ('link[rel="canonical"]', "href", "canonical"),
    ('meta[property="article:url"]', "content", "article:url"),
    ('meta[name="twitter:url"]', "content", "twitter:url"),
    ('meta[property="twitter:url"]', "content", "twitter:url (property)"),
)

ARTICLE_LINK_SELECTORS = (
    'a[data-tracking-control-name="external_url_click"]',  # LinkedIn warning page
    'a[rel="external"]',
    "a.article-link",
    "a.external-link",
    'a[data-type="article"]',
    'a[href*="/r/"]',  # common redirect path
)

DATA_URL_ATTRIBUTES = ("data-url", "data-href", "data-link", "data-article-url")


def _absolute_if_different(candidate: Optional[str], page_url: str) -> Optional[str]:
    """Resolve candidate against page_url; None if invalid or self-referencing."""
    if not candidate:
        return None
    resolved = urljoin(page_url, candidate.strip())
    if urlsplit(resolved).scheme not in ("http", "https"):
        return None
    if resolved == page_url:
        return None
    return resolved


async def _fetch_soup(
    url: str,
    timeout: float,
    user_agent: Optional[str],
    client: Optional[httpx.AsyncClient],
) -> Optional[BeautifulSoup]:
    headers = default_headers(user_agent or settings.user_agent, accept=HTML_ACCEPT)
    async with client_scope(client) as http:
        try:
            resp = await asyncio.wait_for(
                http.get(url, headers=headers, follow_redirects=True), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.debug("[META] Page fetch timed out after %.1fs: %s", timeout, url)
            return None
        except FETCH_ERRORS as e:
            logger.debug("[META] Failed to fetch %s: %s", url, e)
            return None

    if not resp.is_success:
        logger.debug("[META] Failed to fetch page: %d %s", resp.status_code, url)
        return None
    return BeautifulSoup(resp.text, "html.parser")


def find_meta_url(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    """Pick the destination URL out of an already parsed page."""
    for selector, attr, label in META_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        found = _absolute_if_different(element.get(attr), page_url)
        if found:
            logger.debug("[META] Found URL in %s: %s", label, found)
            return found

    for selector in ARTICLE_LINK_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        found = _absolute_if_different(element.get("href"), page_url)
        if found:
            logger.debug('[META] Found article link via "%s": %s', selector, found)
            return found

    return None


def find_selector_url(element: Tag, page_url: str) -> Optional[str]:
    """href, then URL-looking text, then data-* attributes of one element."""
    candidate = element.get("href")

    if not candidate:
        text = element.get_text().strip()
        if text.startswith("http"):
            candidate = text

    if not candidate:
        for attr in DATA_URL_ATTRIBUTES:
            candidate = element.get(attr)
            if candidate:
                break

    return _absolute_if_different(candidate, page_url)


async def extract_url_from_meta(
    url: str,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """Fetch a page and return the article URL its meta tags point at."""
    logger.debug("[META] Fetching page for meta tag extraction: %s", url)
    soup = await _fetch_soup(url, timeout, user_agent, client)
    if soup is None:
        return None

    found = find_meta_url(soup, url)
    if found is None:
        logger.debug("[META] No article URL in meta tags or common selectors: %s", url)
    return found


async def extract_url_from_selector(
    url: str,
    selector: str,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """Fetch a page and return the URL held by the first element matching selector."""
    logger.debug('[META] Fetching page for selector "%s": %s', selector, url)
    soup = await _fetch_soup(url, timeout, user_agent, client)
    if soup is None:
        return None

    try:
        element = soup.select_one(selector)
    except SelectorSyntaxError as e:
        logger.warning('[META] Invalid CSS selector "%s": %s', selector, e)
        return None

    if element is None:
        logger.debug('[META] No element found for selector "%s"', selector)
        return None

    found = find_selector_url(element, url)
    if found:
        logger.debug('[META] Found URL via selector "%s": %s', selector, found)
    return found
