"""Load a batch of newsletters from a YAML input file.

Each entry names the pattern it belongs to and carries either its raw links
or the e-mail body to extract them from:

    newsletters:
      - uid: "4711"
        pattern: daily.dev
        date: 2026-10-01T08:00:00
        html: "<a href='https://daily.dev/r/abc'>...</a>"
      - uid: "4712"
        pattern: JavaScript Weekly
        links:
          - https://javascriptweekly.com/link/123
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..links.extract import extract_article_links
from ..links.models import Newsletter
from .app_config import AppConfig, ConfigError, NewsletterPattern, read_yaml_mapping

logger = logging.getLogger(__name__)


class NewsletterInput(BaseModel):
    """One newsletter entry in the input file."""

    uid: str
    pattern: str
    date: Optional[datetime] = None
    links: Optional[list[str]] = None
    html: Optional[str] = None
    text: Optional[str] = None

    @field_validator("uid", mode="before")
    @classmethod
    def coerce_uid(cls, v: Any) -> str:
        return str(v)


class NewsletterBatchInput(BaseModel):
    newsletters: list[NewsletterInput] = []


def to_newsletter(entry: NewsletterInput, app_config: AppConfig) -> Newsletter:
    """Build a Newsletter, matching its pattern and extracting links if needed."""
    pattern = app_config.find_pattern(entry.pattern)
    if pattern is None:
        logger.warning("[CONFIG] Unknown pattern '%s', using defaults", entry.pattern)
        pattern = NewsletterPattern(name=entry.pattern)

    links = entry.links
    if links is None:
        links = extract_article_links(entry.html, entry.text)

    return Newsletter(
        id=entry.uid,
        pattern=pattern,
        date=entry.date or datetime.now(),
        links=list(links),
    )


def load_newsletters(path: Path, app_config: AppConfig) -> list[Newsletter]:
    """
    Load newsletters from an input YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the file is malformed
    """
    path = Path(path)
    data = read_yaml_mapping(path)
    try:
        batch = NewsletterBatchInput.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid newsletter input in {path}: {e}") from e

    newsletters = [to_newsletter(entry, app_config) for entry in batch.newsletters]
    logger.info(
        "[CONFIG] Loaded %d newsletters (%d links) from %s",
        len(newsletters),
        sum(len(n.links) for n in newsletters),
        path.name,
    )
    return newsletters
