"""Best-effort page title lookup for kept links."""

import asyncio
import logging
import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from ..config.settings import settings
from ..resolve.http import FETCH_ERRORS, HTML_ACCEPT, client_scope, default_headers

logger = logging.getLogger(__name__)


def _clean(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    cleaned = re.sub(r"\s+", " ", text).strip()
    return cleaned or None


def find_title(soup: BeautifulSoup) -> Optional[str]:
    """Title from og:title, then twitter:title, then <title>."""
    for attrs in ({"property": "og:title"}, {"name": "twitter:title"}):
        meta = soup.find("meta", attrs=attrs)
        if meta and _clean(meta.get("content")):
            return _clean(meta.get("content"))

    if soup.title and soup.title.string:
        return _clean(soup.title.string)
    return None


async def fetch_title(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
) -> Optional[str]:
    """Fetch a page and return its title, or None on any failure."""
    headers = default_headers(user_agent or settings.user_agent, accept=HTML_ACCEPT)
    async with client_scope(client) as http:
        try:
            resp = await asyncio.wait_for(
                http.get(url, headers=headers, follow_redirects=True), timeout=timeout
            )
            resp.raise_for_status()
        except asyncio.TimeoutError:
            logger.debug("[TITLE] Timed out fetching %s", url)
            return None
        except FETCH_ERRORS as e:
            logger.debug("[TITLE] Failed to fetch title for %s: %s", url, e)
            return None

    return find_title(BeautifulSoup(resp.text, "html.parser"))
