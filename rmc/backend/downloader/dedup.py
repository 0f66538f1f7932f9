"""
Per-feed image id deduplication.

Each feed owns one `FeedDedupSet` for the whole run:
- ids are insertion-only; the set never shrinks within a run
- the set is handed out exactly once (`DedupRegistry.claim`), so the fetcher
  that claimed it is its only writer and inserts need no locking
- only the claim itself is guarded, against overlapping first touches

The same image id in two different feeds is NOT a duplicate.
"""

from __future__ import annotations

import threading
from typing import Iterator


class FeedDedupSet:
    """Image ids already scheduled for one feed."""

    def __init__(self, feed: str) -> None:
        self._feed = feed
        self._image_ids: set[str] = set()

    @property
    def feed(self) -> str:
        return self._feed

    def add(self, image_id: str) -> bool:
        """
        Register an image id.

        Returns:
            True if the id is new (the candidate should be scheduled), False if
            it is empty or was already seen for this feed.
        """
        key = image_id.strip()
        if not key or key in self._image_ids:
            return False
        self._image_ids.add(key)
        return True

    def __contains__(self, image_id: object) -> bool:
        return image_id in self._image_ids

    def __len__(self) -> int:
        return len(self._image_ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._image_ids))

    @property
    def image_ids(self) -> frozenset[str]:
        return frozenset(self._image_ids)


class DedupRegistry:
    """
    Owner of every feed's dedup set for one run.

    Usage:
        registry = DedupRegistry()
        seen = registry.claim("pics")     # once, by the pics fetcher
        if seen.add(candidate.image_id):
            schedule(candidate)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sets: dict[str, FeedDedupSet] = {}

    def claim(self, feed: str) -> FeedDedupSet:
        """
        Create and hand out the dedup set for a feed.

        Raises:
            RuntimeError: If the feed's set was already claimed in this run.
        """
        with self._lock:
            if feed in self._sets:
                raise RuntimeError(f"dedup set for feed {feed!r} is already owned by another fetcher")
            dedup_set = FeedDedupSet(feed)
            self._sets[feed] = dedup_set
            return dedup_set

    def get(self, feed: str) -> FeedDedupSet | None:
        with self._lock:
            return self._sets.get(feed)

    def feeds(self) -> list[str]:
        with self._lock:
            return sorted(self._sets)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {feed: len(s) for feed, s in self._sets.items()}
