"""LINKS.yaml output for the prepare step.

The file is meant to be reviewed and edited by hand before the generate
step scrapes and summarizes the links.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from ..links.models import Newsletter

_HEADER_HINTS = """#
# You can edit this file to:
# - Remove unwanted links
# - Regroup links under different newsletters
# - Add custom links (uid and pattern_name are optional for manual entries)
# - Change link titles
#
# Fields:
# - name: Newsletter display name (required)
# - date: ISO date string (required)
# - uid: Email UID for marking as processed (optional)
# - pattern_name: Pattern name from config (optional, defaults to name)
# - links: List of articles with title and url (required)
"""


def format_links_document(newsletters: list[Newsletter]) -> dict:
    """Convert newsletters to the LINKS.yaml structure."""
    return {
        "newsletters": [
            {
                "name": newsletter.pattern.name,
                "date": newsletter.date.isoformat(),
                "uid": newsletter.id,
                "pattern_name": newsletter.pattern.name,
                "links": [
                    {"title": article.title or "Untitled", "url": article.url}
                    for article in newsletter.articles
                ],
            }
            for newsletter in newsletters
        ]
    }


def save_links_yaml(
    newsletters: list[Newsletter],
    path: Path,
    generated_at: Optional[datetime] = None,
) -> Path:
    """
    Write newsletters and their links to a LINKS.yaml file.

    Args:
        newsletters: Enriched newsletters
        path: Output file path
        generated_at: Timestamp for the header (default: now)

    Returns:
        Path the file was written to
    """
    generated_at = generated_at or datetime.now()
    total_links = sum(len(n.articles) for n in newsletters)

    header = (
        f"# Generated: {generated_at.isoformat()}\n"
        f"# Total newsletters: {len(newsletters)}\n"
        f"# Total links: {total_links}\n"
        f"{_HEADER_HINTS}\n"
    )
    body = yaml.safe_dump(
        format_links_document(newsletters),
        sort_keys=False,
        allow_unicode=True,
        width=10_000,
    )

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(header + body, encoding="utf-8")
    return path
