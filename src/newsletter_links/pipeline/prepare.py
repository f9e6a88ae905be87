"""Prepare flow: filter, enrich and save newsletter links to LINKS.yaml.

Does not scrape article content or call an LLM, and does not mark e-mails
as processed.
"""

import logging
from pathlib import Path
from typing import Optional

import httpx

from ..config.app_config import AppConfig
from ..config.settings import settings
from ..links.blacklist import filter_blacklisted
from ..links.models import EnrichmentResult, Newsletter
from ..output.links_file import save_links_yaml
from .enrich import LinkEnricher

logger = logging.getLogger(__name__)


async def prepare_links(
    newsletters: list[Newsletter],
    app_config: AppConfig,
    output_path: Optional[Path] = None,
    client: Optional[httpx.AsyncClient] = None,
    concurrency: Optional[int] = None,
) -> EnrichmentResult:
    """
    Run the prepare flow for a batch of newsletters.

    Steps:
    1. Drop blacklisted raw links
    2. Enrich links (resolve, classify, dedup, titles)
    3. Drop blacklisted resolved links
    4. Write LINKS.yaml

    Args:
        newsletters: Newsletters with raw links
        app_config: Application config
        output_path: Where to write LINKS.yaml (default: settings.links_file)
        client: Shared httpx client (default: one client for the whole run)
        concurrency: Newsletters enriched at once

    Returns:
        EnrichmentResult with the newsletters as written
    """
    output_path = Path(output_path or settings.links_file)
    blacklist = app_config.content_filters.blacklisted_urls

    newsletters = filter_blacklisted(newsletters, blacklist)

    if client is None:
        async with httpx.AsyncClient(timeout=app_config.scraper_options.timeout) as owned:
            result = await LinkEnricher(app_config, client=owned, concurrency=concurrency).enrich(
                newsletters
            )
    else:
        result = await LinkEnricher(app_config, client=client, concurrency=concurrency).enrich(
            newsletters
        )

    result.newsletters = filter_blacklisted(result.newsletters, blacklist)

    save_links_yaml(result.newsletters, output_path)
    total_links = sum(len(n.articles) for n in result.newsletters)
    logger.info(
        "[PREPARE] Saved %d links from %d newsletters to %s",
        total_links,
        len(result.newsletters),
        output_path,
    )
    return result
