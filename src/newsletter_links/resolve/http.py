"""Shared httpx client handling for the resolve and title fetchers."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from ..config.settings import settings

HTML_ACCEPT = "text/html,application/xhtml+xml"

# Errors that mean "couldn't fetch", never "bug"
FETCH_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


def default_headers(user_agent: Optional[str] = None, accept: str = "*/*") -> dict[str, str]:
    return {
        "User-Agent": user_agent or settings.user_agent,
        "Accept": accept,
    }


@asynccontextmanager
async def client_scope(
    client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the caller's client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=settings.request_timeout) as owned:
        yield owned
