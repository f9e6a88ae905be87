#!/usr/bin/env python3
"""
Newsletter link preparation

Entry point for the prepare step: loads newsletter links, resolves and
classifies them, and writes LINKS.yaml for review.

Usage:
    python -m newsletter_links.main --input newsletters.yaml
    python -m newsletter_links.main --input newsletters.yaml --output out/LINKS.yaml
    python -m newsletter_links.main --input newsletters.yaml --concurrency 2 --verbose
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config.app_config import ConfigError, load_app_config
from .config.newsletters import load_newsletters
from .config.settings import settings
from .pipeline.prepare import prepare_links


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Resolve, classify and dedupe newsletter links into LINKS.yaml"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=settings.config_file,
        help=f"App config file (default: {settings.config_file})",
    )

    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Newsletter batch file (YAML)",
    )

    parser.add_argument(
        "--output",
        type=Path,
        default=settings.links_file,
        help=f"Where to write the links file (default: {settings.links_file})",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.newsletter_concurrency,
        help=f"Newsletters processed at once (default: {settings.newsletter_concurrency})",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every link decision",
    )

    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        app_config = load_app_config(args.config)
        newsletters = load_newsletters(args.input, app_config)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    if not newsletters:
        print("No newsletters in input, nothing to do")
        return 0

    print("=" * 60)
    print("Newsletter link preparation")
    print("=" * 60)
    print(f"Newsletters: {len(newsletters)}")
    print(f"Links: {sum(len(n.links) for n in newsletters)}")

    result = await prepare_links(
        newsletters,
        app_config,
        output_path=args.output,
        concurrency=args.concurrency,
    )

    stats = result.stats
    print(f"\nProcessed {stats.total} links")
    print(f"   Kept: {stats.kept}")
    print(f"   Filtered: {stats.filtered} (sponsored: {stats.sponsored}, social: {stats.social}, tracking: {stats.tracking})")
    print(f"   Set aside: bonus: {stats.bonus}, youtube: {stats.youtube}")
    if stats.errors:
        print(f"   Errors: {stats.errors}")
    print(f"\nLinks saved to: {args.output}")
    print("Review and edit the file before running the generate step.")

    return 0


def cli() -> None:
    """CLI entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
