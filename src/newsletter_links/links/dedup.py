"""Run-scoped duplicate tracking for links."""

from .tracking import base_url


class SeenUrls:
    """
    URLs already accepted during one enrichment run.

    Shared by every newsletter in the batch so the same article reached from
    two digests is only kept once. Articles are keyed by base URL; bonus and
    video links are keyed by their full URL since the query often identifies
    the resource (``watch?v=...``). Mutated only from the event loop, so no
    locking is needed.
    """

    def __init__(self):
        self._seen: set[str] = set()
        self._exact: set[str] = set()

    def is_duplicate(self, url: str) -> bool:
        return base_url(url) in self._seen

    def add(self, *urls: str) -> None:
        for url in urls:
            self._seen.add(base_url(url))

    def is_duplicate_exact(self, url: str) -> bool:
        return url in self._exact

    def add_exact(self, url: str) -> None:
        self._exact.add(url)

    def __contains__(self, url: str) -> bool:
        return self.is_duplicate(url)

    def __len__(self) -> int:
        return len(self._seen) + len(self._exact)
