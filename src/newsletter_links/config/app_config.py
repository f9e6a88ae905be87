"""Application config: newsletter patterns, content filters and scraper options.

The config lives in a user-edited YAML file (``config.yaml`` by default).
Process-level defaults (user agent, timeouts) come from ``Settings`` and are
only used where the file leaves a value unset.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..resolve.models import ResolutionStrategy
from .settings import settings

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a config or input file cannot be parsed or validated."""


class NestedScrapingConfig(BaseModel):
    """Per-pattern settings for resolving links that sit behind landing pages."""

    enabled: bool = False
    intermediate_domains: list[str] = []  # e.g. ["app.daily.dev", "*.daily.dev"]
    strategy: ResolutionStrategy = ResolutionStrategy.REDIRECT
    selector: Optional[str] = None  # CSS selector for "dom-selector"
    max_depth: Optional[int] = None

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("max_depth must be zero or positive")
        return v

    @model_validator(mode="after")
    def warn_on_missing_selector(self) -> "NestedScrapingConfig":
        if self.strategy == ResolutionStrategy.DOM_SELECTOR and not self.selector:
            logger.warning(
                "[CONFIG] dom-selector strategy configured without a selector; "
                "links will be left unresolved"
            )
        return self


class NewsletterPattern(BaseModel):
    """How a newsletter is recognised and how its links are resolved."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    from_address: str = Field(default="", alias="from")
    subject: list[str] = []
    enabled: bool = True
    max_articles: Optional[int] = None
    nested_scraping: Optional[NestedScrapingConfig] = None


class ContentFilters(BaseModel):
    """Topic and URL filters applied around enrichment."""

    skip_topics: list[str] = []
    focus_topics: list[str] = []
    blacklisted_urls: list[str] = []


class NestedScrapingOptions(BaseModel):
    """Global knobs for nested resolution requests."""

    follow_redirects: bool = settings.follow_redirects
    max_redirects: int = settings.max_redirects
    timeout: float = settings.request_timeout


class ScraperOptions(BaseModel):
    """HTTP options shared by every fetch the pipeline makes."""

    timeout: float = settings.request_timeout
    user_agent: str = settings.user_agent
    retry_attempts: int = settings.retry_max_attempts
    nested_scraping: Optional[NestedScrapingOptions] = None


class AppConfig(BaseModel):
    """Top-level application config."""

    newsletter_patterns: list[NewsletterPattern] = []
    content_filters: ContentFilters = ContentFilters()
    scraper_options: ScraperOptions = ScraperOptions()

    def intermediate_domains(self) -> list[str]:
        """All intermediate domains configured across patterns."""
        domains: list[str] = []
        for pattern in self.newsletter_patterns:
            if pattern.nested_scraping:
                domains.extend(pattern.nested_scraping.intermediate_domains)
        return domains

    def find_pattern(self, name: str) -> Optional[NewsletterPattern]:
        for pattern in self.newsletter_patterns:
            if pattern.name == name:
                return pattern
        return None


def read_yaml_mapping(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")
    return data


def load_app_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load the application config from YAML.

    Args:
        path: Path to the config file (default: settings.config_file)

    Returns:
        Validated AppConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the file isn't valid YAML or fails validation
    """
    if path is None:
        path = settings.config_file
    path = Path(path)

    data = read_yaml_mapping(path)
    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e

    logger.info(
        "[CONFIG] Loaded %d newsletter patterns from %s",
        len(config.newsletter_patterns),
        path.name,
    )
    return config
