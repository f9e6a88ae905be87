"""Small URL parsing helpers shared by the link modules."""

from urllib.parse import SplitResult, urlsplit


def parse_url(url: str) -> SplitResult:
    """Split an absolute URL, raising ValueError when it isn't one."""
    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Not an absolute URL: {url!r}")
    # Accessing .port validates it
    parts.port
    return parts


def host_matches(hostname: str, domain: str) -> bool:
    """True if hostname is the domain itself or one of its subdomains."""
    hostname = hostname.lower()
    domain = domain.lower()
    return hostname == domain or hostname.endswith("." + domain)


def path_segments(path: str) -> list[str]:
    return [p for p in path.split("/") if p]
