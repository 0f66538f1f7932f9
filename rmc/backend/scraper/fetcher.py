from __future__ import annotations

import asyncio
import logging

from rmc.shared.filter_engine.engine import filter_image_candidates
from rmc.shared.filter_engine.models import ImageCandidate, ListingEntry

from ..fs.storage import FilesystemError
from ..net.http import NetworkError
from ..pipeline.context import PipelineContext
from ..pipeline.messages import ScheduledMessage
from .feed_url import Feed, build_listing_url
from .listing_parser import ParseError, parse_listing_entries


logger = logging.getLogger(__name__)


class MetadataFetcher:
    """
    Fetches one feed's listing and schedules its new image candidates.

    One fetcher task per feed; the task claims the feed's dedup set and is its
    only writer. Listing failures stay inside the feed (zero candidates).
    """

    def __init__(self, ctx: PipelineContext) -> None:
        self._ctx = ctx

    async def fetch(self, feed_name: str) -> int:
        """
        Returns:
            Number of candidates enqueued for this feed.
        """
        seen = self._ctx.dedup.claim(feed_name)
        feed = Feed.from_options(feed_name, self._ctx.options)

        entries = await self._load_entries(feed)
        if entries is None:
            return 0

        candidates = filter_image_candidates(entries, feed=feed_name)

        try:
            self._ctx.storage.ensure_feed_dir(feed_name)
        except FilesystemError as exc:
            # Items still flow; each one fails on file creation.
            logger.warning("r/%s: %s", feed_name, exc)

        accepted: list[ImageCandidate] = [c for c in candidates if seen.add(c.image_id)]

        logger.info(
            "r/%s: %d listing entries, %d image candidates, %d scheduled",
            feed_name,
            len(entries),
            len(candidates),
            len(accepted),
        )

        if not accepted:
            return 0

        await self._ctx.messages.put(ScheduledMessage(feed=feed_name, count=len(accepted)))
        for candidate in accepted:
            await self._ctx.download_queue.put(candidate)
        return len(accepted)

    async def _load_entries(self, feed: Feed) -> tuple[ListingEntry, ...] | None:
        url = build_listing_url(feed)
        logger.debug("r/%s: fetching %s", feed.name, url)

        try:
            payload = await asyncio.to_thread(self._ctx.fetch_listing, url)
        except NetworkError as exc:
            logger.warning("r/%s: listing fetch failed: %s", feed.name, exc)
            return None

        try:
            return parse_listing_entries(payload)
        except ParseError as exc:
            logger.warning("r/%s: %s", feed.name, exc)
            return None
