"""Configuration settings for the newsletter link pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    # HTTP
    user_agent: str = os.getenv(
        "NEWSLETTER_USER_AGENT", "Mozilla/5.0 (compatible; NewsletterBot/1.0)"
    )
    request_timeout: float = 15.0  # seconds, per redirect walk / page fetch
    max_redirects: int = 5
    follow_redirects: bool = True

    # Enrichment
    newsletter_concurrency: int = 5
    resolution_cache_size: int = 100

    # Retry (mail operations)
    retry_max_attempts: int = 3
    retry_initial_delay: float = 1.0
    retry_max_delay: float = 10.0
    retry_backoff_multiplier: float = 2.0

    # Paths
    project_root: Path = Path(__file__).parent.parent.parent.parent
    config_file: Path = project_root / "config.yaml"
    links_file: Path = Path("LINKS.yaml")

    class Config:
        env_file = ".env"
        extra = "ignore"


# Global settings instance
settings = Settings()
