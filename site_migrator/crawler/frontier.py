"""
Crawl frontier: pending URLs plus the seen and visited sets.
"""

from collections import deque
from typing import Iterable, Optional


class Frontier:
    """
    FIFO queue of URLs to crawl.

    A URL is enqueued at most once (dedup at insertion) and marked
    visited at most once, as soon as it is dequeued.
    """

    def __init__(self, visited: Iterable[str] = ()):
        self._queue: deque[str] = deque()
        self._seen: set[str] = set()
        self._visited: set[str] = set(visited)

    def add(self, url: Optional[str]) -> bool:
        """
        Enqueue url unless it was already queued or visited.

        Returns:
            True if url was enqueued
        """
        if not url or url in self._seen or url in self._visited:
            return False
        self._queue.append(url)
        self._seen.add(url)
        return True

    def add_all(self, urls: Iterable[Optional[str]]) -> int:
        """Enqueue several URLs, return how many were new."""
        return sum(1 for url in urls if self.add(url))

    def pop(self) -> Optional[str]:
        """
        Dequeue the next unvisited URL and mark it visited.

        Returns:
            URL to fetch, or None when the queue is exhausted
        """
        while self._queue:
            url = self._queue.popleft()
            if url in self._visited:
                continue
            self._visited.add(url)
            return url
        return None

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)
