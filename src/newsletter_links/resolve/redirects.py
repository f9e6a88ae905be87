"""Follow HTTP redirect chains by hand to find a link's final destination.

Redirects are walked one hop at a time (redirect following disabled on the
client) so every hop is recorded and loops can be detected.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import urljoin, urlsplit

import httpx

from ..config.settings import settings
from .http import FETCH_ERRORS, client_scope, default_headers
from .models import RedirectResult

logger = logging.getLogger(__name__)


async def follow_redirect(
    url: str,
    max_redirects: int = 5,
    timeout: float = 15.0,
    user_agent: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> RedirectResult:
    """
    Resolve a URL's final destination by walking its redirects.

    Each hop is probed with HEAD; endpoints that answer 404/405 to HEAD are
    retried with GET for that hop. The walk stops on a 2xx, on any non-3xx
    status, on a 3xx without Location, on a URL already visited (cycle), or
    after max_redirects hops.

    Args:
        url: Starting URL
        max_redirects: Maximum hops to follow
        timeout: Budget in seconds for the whole walk
        user_agent: User-Agent header (default: settings.user_agent)
        client: Optional shared client

    Returns:
        RedirectResult with the last known URL and the chain walked so far.
        Errors and timeouts never propagate.
    """
    result = RedirectResult(final_url=url, redirect_chain=[url])
    headers = default_headers(user_agent or settings.user_agent)

    async with client_scope(client) as http:
        try:
            await asyncio.wait_for(
                _walk(http, result, max_redirects, headers), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.debug("[REDIRECT] Timed out after %.1fs for %s", timeout, url)
        except FETCH_ERRORS as e:
            logger.debug("[REDIRECT] Error following %s: %s", result.final_url, e)

    return result


async def _probe(
    http: httpx.AsyncClient, url: str, headers: dict[str, str]
) -> httpx.Response:
    response = await http.request("HEAD", url, headers=headers, follow_redirects=False)
    # Some tracking endpoints (daily.dev) reject HEAD but redirect on GET
    if response.status_code in (404, 405):
        logger.debug(
            "[REDIRECT] HEAD returned %d for %s, retrying with GET",
            response.status_code,
            url,
        )
        response = await http.request("GET", url, headers=headers, follow_redirects=False)
    return response


async def _walk(
    http: httpx.AsyncClient,
    result: RedirectResult,
    max_redirects: int,
    headers: dict[str, str],
) -> None:
    """Advance result hop by hop; result holds the partial chain if cancelled."""
    visited = {result.final_url}
    hops = 0

    while hops < max_redirects:
        current = result.final_url
        logger.debug("[REDIRECT] Checking %s", current)
        response = await _probe(http, current, headers)
        status = response.status_code

        if 200 <= status < 300:
            logger.debug("[REDIRECT] Final URL reached: %s", current)
            return

        if not 300 <= status < 400:
            logger.debug("[REDIRECT] Unexpected status %d for %s", status, current)
            return

        location = response.headers.get("location")
        if not location:
            logger.debug("[REDIRECT] %d without Location header at %s", status, current)
            return

        next_url = urljoin(current, location.strip())
        if urlsplit(next_url).scheme not in ("http", "https"):
            logger.debug("[REDIRECT] Invalid redirect location: %s", location)
            return

        if next_url in visited:
            logger.debug("[REDIRECT] Circular redirect detected: %s", next_url)
            return

        visited.add(next_url)
        result.redirect_chain.append(next_url)
        result.final_url = next_url
        hops += 1
        logger.debug("[REDIRECT] Redirected to %s (%d)", next_url, status)

    logger.debug("[REDIRECT] Maximum redirects (%d) reached", max_redirects)
