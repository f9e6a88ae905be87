"""Resolve intermediate links to the article they point at.

Strategies:
- redirect: follow HTTP redirects
- meta-tags: read og:url / canonical / twitter:url from the landing page
- dom-selector: read the URL from a caller-supplied CSS selector
- auto: redirect, then meta-tags, then dom-selector (only with a selector)

A URL found on a page is itself followed for redirects while depth remains.
Resolution is best-effort: failures return the input URL unresolved.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config.app_config import ScraperOptions
from ..config.settings import settings
from .extractors import extract_url_from_meta, extract_url_from_selector
from .models import ResolutionStrategy, ResolvedUrl
from .redirects import follow_redirect

logger = logging.getLogger(__name__)

AUTO_ORDER = (
    ResolutionStrategy.REDIRECT,
    ResolutionStrategy.META_TAGS,
    ResolutionStrategy.DOM_SELECTOR,
)


@dataclass
class ResolverOptions:
    """HTTP knobs used by every resolution strategy."""

    user_agent: str = settings.user_agent
    timeout: float = settings.request_timeout
    max_redirects: int = settings.max_redirects
    follow_redirects: bool = settings.follow_redirects

    @classmethod
    def from_scraper_options(cls, options: Optional[ScraperOptions]) -> "ResolverOptions":
        if options is None:
            return cls()
        nested = options.nested_scraping
        return cls(
            user_agent=options.user_agent,
            timeout=nested.timeout if nested else options.timeout,
            max_redirects=nested.max_redirects if nested else settings.max_redirects,
            follow_redirects=nested.follow_redirects if nested else settings.follow_redirects,
        )


class ResolutionCache:
    """
    In-memory cache of resolutions for one run.

    Keyed by url, strategy and selector. Holds at most max_size entries and
    evicts the oldest insertion first.
    """

    def __init__(self, max_size: int = 100):
        self.max_size = max_size
        self._entries: OrderedDict[str, ResolvedUrl] = OrderedDict()

    @staticmethod
    def key(url: str, strategy: ResolutionStrategy, selector: Optional[str]) -> str:
        return f"{url}:{strategy.value}:{selector or ''}"

    def get(self, key: str) -> Optional[ResolvedUrl]:
        return self._entries.get(key)

    def put(self, key: str, resolved: ResolvedUrl) -> None:
        self._entries[key] = resolved
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class UrlResolver:
    """
    Resolves links with a chosen strategy and a run-scoped cache.

    Construct one per enrichment run and pass it where needed; the cache
    lives and dies with the resolver.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        options: Optional[ResolverOptions] = None,
        cache: Optional[ResolutionCache] = None,
    ):
        """
        Initialize resolver.

        Args:
            client: Shared httpx client (default: one short-lived client per request)
            options: HTTP options (default: from settings)
            cache: Resolution cache (default: new cache of settings.resolution_cache_size)
        """
        self.client = client
        self.options = options or ResolverOptions()
        self.cache = cache if cache is not None else ResolutionCache(settings.resolution_cache_size)

    async def resolve(
        self,
        url: str,
        strategy: ResolutionStrategy = ResolutionStrategy.AUTO,
        selector: Optional[str] = None,
        max_depth: int = 1,
    ) -> ResolvedUrl:
        """
        Resolve a possibly nested URL to the article URL.

        Args:
            url: Link to resolve
            strategy: Resolution strategy
            selector: CSS selector, required by dom-selector, optional for auto
            max_depth: Levels of nesting allowed; <= 0 resolves nothing

        Returns:
            ResolvedUrl; unresolved (final == original) if nothing was found
            or anything failed
        """
        if max_depth <= 0:
            logger.debug("[RESOLVER] Max resolution depth reached for %s", url)
            return ResolvedUrl.unresolved(url)

        strategy = ResolutionStrategy(strategy)
        if strategy == ResolutionStrategy.AUTO:
            plan = [s for s in AUTO_ORDER if s != ResolutionStrategy.DOM_SELECTOR or selector]
        else:
            plan = [strategy]

        logger.debug("[RESOLVER] Resolving %s with strategy %s", url, strategy.value)
        try:
            for step in plan:
                resolved = await self._run_strategy(step, url, selector, max_depth)
                if resolved is not None:
                    return resolved
        except Exception as e:
            logger.warning("[RESOLVER] Resolution failed for %s: %s", url, e)
            return ResolvedUrl.unresolved(url)

        logger.debug("[RESOLVER] No nested URL found, using original: %s", url)
        return ResolvedUrl.unresolved(url)

    async def resolve_with_cache(
        self,
        url: str,
        strategy: ResolutionStrategy = ResolutionStrategy.AUTO,
        selector: Optional[str] = None,
        max_depth: int = 1,
    ) -> ResolvedUrl:
        """resolve(), served from the run cache when the same request was made before."""
        key = ResolutionCache.key(url, ResolutionStrategy(strategy), selector)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("[RESOLVER] Using cached resolution for %s", url)
            return cached

        resolved = await self.resolve(url, strategy, selector, max_depth)
        self.cache.put(key, resolved)
        return resolved

    async def _run_strategy(
        self,
        strategy: ResolutionStrategy,
        url: str,
        selector: Optional[str],
        max_depth: int,
    ) -> Optional[ResolvedUrl]:
        if strategy == ResolutionStrategy.REDIRECT:
            return await self._by_redirect(url)
        if strategy == ResolutionStrategy.META_TAGS:
            return await self._by_meta_tags(url, max_depth)
        if strategy == ResolutionStrategy.DOM_SELECTOR:
            return await self._by_dom_selector(url, selector, max_depth)
        raise ValueError(f"Unsupported strategy: {strategy}")

    async def _by_redirect(self, url: str) -> Optional[ResolvedUrl]:
        if not self.options.follow_redirects:
            return None

        redirect = await follow_redirect(
            url,
            max_redirects=self.options.max_redirects,
            timeout=self.options.timeout,
            user_agent=self.options.user_agent,
            client=self.client,
        )
        if redirect.final_url == url:
            return None

        logger.debug("[RESOLVER] Redirect chain: %s", " -> ".join(redirect.redirect_chain))
        return ResolvedUrl(
            original_url=url,
            final_url=redirect.final_url,
            is_nested=True,
            redirect_chain=redirect.redirect_chain,
        )

    async def _by_meta_tags(self, url: str, max_depth: int) -> Optional[ResolvedUrl]:
        found = await extract_url_from_meta(
            url,
            timeout=self.options.timeout,
            user_agent=self.options.user_agent,
            client=self.client,
        )
        if not found or found == url:
            return None
        return await self._follow_found(url, found, max_depth)

    async def _by_dom_selector(
        self, url: str, selector: Optional[str], max_depth: int
    ) -> Optional[ResolvedUrl]:
        if not selector:
            logger.warning("[RESOLVER] dom-selector strategy needs a selector, skipping %s", url)
            return None

        found = await extract_url_from_selector(
            url,
            selector,
            timeout=self.options.timeout,
            user_agent=self.options.user_agent,
            client=self.client,
        )
        if not found or found == url:
            return None
        return await self._follow_found(url, found, max_depth)

    async def _follow_found(self, url: str, found: str, max_depth: int) -> ResolvedUrl:
        """Chase redirects hiding behind a URL extracted from a page."""
        result = ResolvedUrl(
            original_url=url,
            final_url=found,
            is_nested=True,
            redirect_chain=[url, found],
        )
        if max_depth <= 1 or not self.options.follow_redirects:
            return result

        logger.debug("[RESOLVER] Following redirects from extracted URL %s", found)
        nested = await self.resolve(found, ResolutionStrategy.REDIRECT, None, max_depth - 1)
        if not nested.is_nested or nested.final_url in (url, found):
            return result

        chain = [url, found] + (nested.redirect_chain or [nested.final_url])[1:]
        result.final_url = nested.final_url
        result.redirect_chain = list(dict.fromkeys(chain))
        return result
