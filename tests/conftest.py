"""Shared fixtures: drive async code against an in-memory HTTP transport."""

import asyncio
from typing import Awaitable, Callable

import httpx
import pytest

from newsletter_links.config.app_config import AppConfig, NestedScrapingConfig, NewsletterPattern


@pytest.fixture
def run_with_transport():
    """Run ``fn(client)`` with an AsyncClient whose requests go to ``handler``."""

    def _run(handler: Callable[[httpx.Request], httpx.Response], fn: Callable[[httpx.AsyncClient], Awaitable]):
        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fn(client)

        return asyncio.run(go())

    return _run


@pytest.fixture
def daily_dev_config() -> AppConfig:
    return AppConfig(
        newsletter_patterns=[
            NewsletterPattern(
                name="daily.dev",
                nested_scraping=NestedScrapingConfig(
                    enabled=True,
                    intermediate_domains=["*.daily.dev"],
                    strategy="dom-selector",
                    selector="a.read-post",
                    max_depth=2,
                ),
            )
        ]
    )
