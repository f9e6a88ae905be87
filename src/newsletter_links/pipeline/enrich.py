"""Link enrichment: turn raw newsletter links into curated article candidates.

Per link:
1. classify; tracking/social/sponsored links are dropped
2. bonus resources and YouTube videos are resolved and set aside in their
   own collections
3. everything else is decoded (known tracking payloads), resolved, stripped
   of tracking params, classified again, deduplicated across the whole
   batch and given a title

Newsletters run concurrently under a semaphore; links inside a newsletter run
one after another so the shared seen-set and resolution cache are only touched
from one place at a time.
"""

import asyncio
import logging
import time
from dataclasses import replace
from datetime import datetime
from typing import Optional

import httpx

from ..config.app_config import AppConfig, NewsletterPattern
from ..config.settings import settings
from ..links.classifier import categorize_link
from ..links.dedup import SeenUrls
from ..links.models import (
    DROPPED_CATEGORIES,
    Article,
    EnrichmentResult,
    EnrichmentStats,
    LinkCategory,
    Newsletter,
)
from ..links.titles import fetch_title
from ..links.tracking import strip_tracking_params, title_from_url, try_decode_tracking_url
from ..resolve.models import ResolutionStrategy, ResolvedUrl
from ..resolve.resolver import ResolverOptions, UrlResolver

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY = ResolutionStrategy.REDIRECT
DEFAULT_MAX_DEPTH = 2

BONUS_NEWSLETTER_NAME = "Bonus Resources"
YOUTUBE_NEWSLETTER_NAME = "YouTube Content"


class LinkEnricher:
    """
    Enriches one batch of newsletters.

    Holds the run's state (stats, seen URLs, side collections, resolution
    cache), so use a fresh instance per run.
    """

    def __init__(
        self,
        app_config: AppConfig,
        client: Optional[httpx.AsyncClient] = None,
        resolver: Optional[UrlResolver] = None,
        seen: Optional[SeenUrls] = None,
        concurrency: Optional[int] = None,
    ):
        """
        Initialize enricher.

        Args:
            app_config: Patterns and scraper options
            client: Shared httpx client for resolution and title lookups
            resolver: URL resolver (default: new resolver with its own cache)
            seen: Seen-URL set (default: empty)
            concurrency: Newsletters processed at once (default: settings.newsletter_concurrency)
        """
        self.app_config = app_config
        self.client = client
        self.options = ResolverOptions.from_scraper_options(app_config.scraper_options)
        self.resolver = resolver or UrlResolver(client=client, options=self.options)
        self.seen = seen if seen is not None else SeenUrls()
        self.concurrency = concurrency or settings.newsletter_concurrency

        self.stats = EnrichmentStats()
        self.bonus_links: list[Article] = []
        self.youtube_links: list[Article] = []

    async def enrich(self, newsletters: list[Newsletter]) -> EnrichmentResult:
        """
        Enrich every newsletter in the batch.

        Returns:
            EnrichmentResult with newsletters in input order, followed by
            synthetic "Bonus Resources" / "YouTube Content" newsletters when
            those collections are non-empty
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(newsletter: Newsletter) -> Newsletter:
            async with semaphore:
                return await self._enrich_newsletter(newsletter)

        enriched = list(await asyncio.gather(*(run(n) for n in newsletters)))

        stamp = int(time.time() * 1000)
        if self.bonus_links:
            enriched.append(_synthetic(f"bonus-{stamp}", BONUS_NEWSLETTER_NAME, self.bonus_links))
        if self.youtube_links:
            enriched.append(
                _synthetic(f"youtube-{stamp}", YOUTUBE_NEWSLETTER_NAME, self.youtube_links)
            )

        s = self.stats
        logger.info(
            "[ENRICH] Cleaned %d links -> kept %d articles | filtered: %d "
            "(sponsored: %d, social: %d, tracking: %d) | special: bonus: %d, yt: %d | errors: %d",
            s.total,
            s.kept,
            s.filtered,
            s.sponsored,
            s.social,
            s.tracking,
            s.bonus,
            s.youtube,
            s.errors,
        )
        return EnrichmentResult(newsletters=enriched, stats=self.stats)

    async def _enrich_newsletter(self, newsletter: Newsletter) -> Newsletter:
        logger.debug(
            "[ENRICH] Processing %s (%d links)", newsletter.pattern.name, len(newsletter.links)
        )
        articles: list[Article] = []

        for url in newsletter.links:
            self.stats.total += 1
            try:
                article = await self._process_link(url, newsletter.pattern)
            except Exception as e:
                self.stats.errors += 1
                logger.warning("[ENRICH] Error processing %s: %s", url, e)
                continue
            if article is not None:
                articles.append(article)

        logger.debug(
            "[ENRICH] Kept %d/%d links from %s",
            len(articles),
            len(newsletter.links),
            newsletter.pattern.name,
        )
        return replace(newsletter, articles=articles)

    async def _process_link(self, url: str, pattern: NewsletterPattern) -> Optional[Article]:
        category = categorize_link(url, self.app_config)

        if category in DROPPED_CATEGORIES:
            self.stats.record(category)
            logger.debug("[ENRICH] Dropped %s link: %s", category.value, url)
            return None

        if category in (LinkCategory.BONUS, LinkCategory.YOUTUBE):
            self.stats.record(category)
            resolved = await self._resolve(url, pattern)
            self._set_aside(strip_tracking_params(resolved.final_url), category)
            return None

        decoded = try_decode_tracking_url(url)
        if decoded != url:
            logger.debug("[ENRICH] Decoded tracking URL: %s -> %s", url, decoded)

        resolved = await self._resolve(decoded, pattern)
        final_url = strip_tracking_params(resolved.final_url)

        final_category = categorize_link(final_url, self.app_config)
        if final_category != LinkCategory.KEEP:
            self.stats.record(final_category)
            logger.debug(
                "[ENRICH] Filtered after resolution (%s): %s", final_category.value, final_url
            )
            if final_category in (LinkCategory.BONUS, LinkCategory.YOUTUBE):
                self._set_aside(final_url, final_category)
            return None

        if self.seen.is_duplicate(final_url):
            logger.debug("[ENRICH] Duplicate (skipping): %s", final_url)
            return None
        # The original link's base is recorded too, to catch the same article
        # reached through a different tracking path
        self.seen.add(final_url, url)

        title = await fetch_title(
            final_url,
            client=self.client,
            timeout=self.options.timeout,
            user_agent=self.options.user_agent,
        )
        if not title:
            title = title_from_url(final_url)

        self.stats.kept += 1
        if resolved.is_nested:
            logger.debug("[ENRICH] Resolved: %s -> %s", url, final_url)
        else:
            logger.debug("[ENRICH] Kept: %s", final_url)
        return Article(title=title, url=final_url)

    async def _resolve(self, url: str, pattern: NewsletterPattern) -> ResolvedUrl:
        nested = pattern.nested_scraping
        strategy = nested.strategy if nested else DEFAULT_STRATEGY
        selector = nested.selector if nested else None
        max_depth = DEFAULT_MAX_DEPTH
        if nested and nested.max_depth is not None:
            max_depth = nested.max_depth
        return await self.resolver.resolve_with_cache(url, strategy, selector, max_depth)

    def _set_aside(self, url: str, category: LinkCategory) -> None:
        if self.seen.is_duplicate_exact(url):
            return
        self.seen.add_exact(url)
        article = Article(title=title_from_url(url), url=url)
        if category == LinkCategory.BONUS:
            self.bonus_links.append(article)
        else:
            self.youtube_links.append(article)


def _synthetic(newsletter_id: str, name: str, articles: list[Article]) -> Newsletter:
    return Newsletter(
        id=newsletter_id,
        pattern=NewsletterPattern(name=name),
        date=datetime.now(),
        articles=articles,
    )


async def enrich_newsletters(
    newsletters: list[Newsletter],
    app_config: AppConfig,
    client: Optional[httpx.AsyncClient] = None,
    concurrency: Optional[int] = None,
) -> EnrichmentResult:
    """Enrich a batch with a fresh run-scoped enricher."""
    enricher = LinkEnricher(app_config, client=client, concurrency=concurrency)
    return await enricher.enrich(newsletters)
