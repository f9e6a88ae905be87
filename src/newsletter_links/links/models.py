"""Data models for newsletters, links and enrichment results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..config.app_config import NewsletterPattern


class LinkCategory(str, Enum):
    """Purpose of a link, as decided by the classifier."""

    KEEP = "keep"
    SPONSORED = "sponsored"
    SOCIAL = "social"
    TRACKING = "tracking"
    BONUS = "bonus"
    YOUTUBE = "youtube"


# Categories that are dropped outright
DROPPED_CATEGORIES = frozenset(
    {LinkCategory.TRACKING, LinkCategory.SOCIAL, LinkCategory.SPONSORED}
)


@dataclass
class Article:
    """A link that survived classification and dedup.

    ``content`` stays empty here; the scraper fills it later.
    """

    title: str
    url: str
    content: str = ""


@dataclass
class Newsletter:
    """One newsletter e-mail: raw links in, enriched articles out."""

    id: str
    pattern: NewsletterPattern
    date: datetime
    links: list[str] = field(default_factory=list)
    articles: list[Article] = field(default_factory=list)


@dataclass
class EnrichmentStats:
    """Counters accumulated across a whole enrichment run."""

    total: int = 0
    kept: int = 0
    sponsored: int = 0
    social: int = 0
    tracking: int = 0
    bonus: int = 0
    youtube: int = 0
    errors: int = 0

    def record(self, category: LinkCategory) -> None:
        """Count one link under its category."""
        name = "kept" if category == LinkCategory.KEEP else category.value
        setattr(self, name, getattr(self, name) + 1)

    @property
    def filtered(self) -> int:
        return self.sponsored + self.social + self.tracking

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "kept": self.kept,
            "sponsored": self.sponsored,
            "social": self.social,
            "tracking": self.tracking,
            "bonus": self.bonus,
            "youtube": self.youtube,
            "errors": self.errors,
        }


@dataclass
class EnrichmentResult:
    """Enriched newsletters plus the run's stats."""

    newsletters: list[Newsletter]
    stats: EnrichmentStats
