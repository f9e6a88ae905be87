"""Data models for URL resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ResolutionStrategy(str, Enum):
    """How to discover the real destination behind an intermediate link."""

    REDIRECT = "redirect"
    META_TAGS = "meta-tags"
    DOM_SELECTOR = "dom-selector"
    AUTO = "auto"


@dataclass
class ResolvedUrl:
    """Outcome of resolving one URL.

    ``final_url == original_url`` and ``is_nested`` is False when no strategy
    found a different destination. ``redirect_chain``, when set, starts with
    ``original_url``, ends with ``final_url`` and has no repeated entries.
    """

    original_url: str
    final_url: str
    is_nested: bool = False
    redirect_chain: Optional[list[str]] = None

    @classmethod
    def unresolved(cls, url: str) -> "ResolvedUrl":
        return cls(original_url=url, final_url=url)


@dataclass
class RedirectResult:
    """Result of walking an HTTP redirect chain."""

    final_url: str
    redirect_chain: list[str] = field(default_factory=list)
