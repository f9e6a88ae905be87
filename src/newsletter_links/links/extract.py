"""Extract candidate article links from newsletter e-mail bodies."""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_TEXT_URL_RE = re.compile(r"https?://[^\s<>\"']+")

# Never article links
_ALWAYS_SKIP = ("unsubscribe", "preferences", "mailto:")
# Share buttons in the HTML footer
_HTML_SKIP = _ALWAYS_SKIP + ("twitter.com", "facebook.com", "linkedin.com")


def _keep(url: str, skip: tuple[str, ...]) -> bool:
    return not any(s in url for s in skip)


def links_from_html(html: str) -> list[str]:
    """Unique absolute hrefs from an HTML body, in document order."""
    soup = BeautifulSoup(html, "html.parser")
    urls: dict[str, None] = {}
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if href.startswith("http") and _keep(href, _HTML_SKIP):
            urls.setdefault(href, None)
    return list(urls)


def links_from_text(text: str) -> list[str]:
    """URLs found in a plain-text body."""
    return [u for u in _TEXT_URL_RE.findall(text) if _keep(u, _ALWAYS_SKIP)]


def extract_article_links(html: Optional[str], text: Optional[str] = None) -> list[str]:
    """
    Extract candidate article links from an e-mail.

    HTML anchors are preferred; the plain-text body is scanned only when the
    HTML part is missing or yields no links.
    """
    if isinstance(html, str) and html.strip():
        links = links_from_html(html)
        if links:
            return links
        logger.debug("[EXTRACT] HTML body had no links, falling back to text")

    return links_from_text(text or "")
