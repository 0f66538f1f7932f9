"""
Collection run coordinator.

Stages: FetchingMetadata -> Downloading -> ReportingDone

Shutdown is staged so no channel closes while an upstream stage may still
write to it:
1. join every fetcher task, then close the download queue
2. the dispatcher drains the queue and joins every worker task
3. only then close the message channel, which lets the aggregator finish
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from rmc.shared.download_state import DownloadState
from rmc.shared.filter_engine.models import ImageCandidate
from rmc.shared.stats.metrics import compute_runtime_s
from rmc.shared.stats.totals import ProgressTotals

from ..downloader.admission import AdmissionController
from ..downloader.dedup import DedupRegistry
from ..downloader.downloader import DownloadOutcome, ImageDownloader
from ..fs.storage import FeedStorageManager
from ..net.http import fetch_bytes
from ..scraper.fetcher import MetadataFetcher
from ..settings.models import ScrapeOptions
from .channel import Channel
from .context import FetchListingFunc, PipelineContext
from .messages import PipelineMessage, StateMessage
from .progress import ProgressAggregator, ProgressSink


logger = logging.getLogger(__name__)


class CoordinatorStage(str, Enum):
    IDLE = "Idle"
    FETCHING_METADATA = "FetchingMetadata"
    DOWNLOADING = "Downloading"
    REPORTING_DONE = "ReportingDone"


class Coordinator:
    """
    Runs one collection over the configured feeds.

    Usage:
        coordinator = Coordinator(options, sink=TqdmProgressSink())
        totals = asyncio.run(coordinator.run())

    Raises `ConfigurationError` from the constructor for invalid options; a
    constructed coordinator never fails the run because of a single feed or item.
    """

    def __init__(
        self,
        options: ScrapeOptions,
        *,
        sink: Optional[ProgressSink] = None,
        fetch_listing: Optional[FetchListingFunc] = None,
        downloader: Optional[ImageDownloader] = None,
        on_stage: Optional[Callable[[CoordinatorStage], None]] = None,
    ) -> None:
        self._options = options.normalized()
        self._sink = sink
        self._fetch_listing: FetchListingFunc = fetch_listing or fetch_bytes
        self._downloader = downloader
        self._on_stage = on_stage
        self._stage = CoordinatorStage.IDLE
        self._aggregator: Optional[ProgressAggregator] = None
        self._ctx: Optional[PipelineContext] = None
        self._started_at: Optional[datetime] = None
        self._finished_at: Optional[datetime] = None

    @property
    def options(self) -> ScrapeOptions:
        return self._options

    @property
    def stage(self) -> CoordinatorStage:
        return self._stage

    @property
    def context(self) -> Optional[PipelineContext]:
        return self._ctx

    @property
    def totals(self) -> ProgressTotals:
        if self._aggregator is None:
            return ProgressTotals()
        return self._aggregator.totals

    @property
    def runtime_s(self) -> float:
        return compute_runtime_s(self._started_at, self._finished_at)

    def _set_stage(self, stage: CoordinatorStage) -> None:
        self._stage = stage
        logger.info("Stage: %s", stage.value)
        if self._on_stage is not None:
            self._on_stage(stage)

    def _build_context(self) -> PipelineContext:
        storage = FeedStorageManager(
            Path(self._options.output_directory),
            root_folder_only=self._options.root_folder_only,
        )
        downloader = self._downloader or ImageDownloader(storage=storage)
        return PipelineContext(
            options=self._options,
            storage=downloader.storage,
            dedup=DedupRegistry(),
            admission=AdmissionController(self._options.max_concurrent_downloads),
            downloader=downloader,
            fetch_listing=self._fetch_listing,
            download_queue=Channel(name="download queue"),
            messages=Channel(name="message stream"),
        )

    async def run(self) -> ProgressTotals:
        if self._ctx is not None:
            raise RuntimeError("a Coordinator runs exactly once")

        self._started_at = datetime.now(timezone.utc)
        ctx = self._ctx = self._build_context()
        aggregator = self._aggregator = ProgressAggregator(ctx.messages, self._sink, started_at=self._started_at)

        aggregator_task = asyncio.create_task(aggregator.run(), name="rmc-progress")
        dispatcher_task = asyncio.create_task(self._dispatch_downloads(ctx), name="rmc-dispatcher")

        self._set_stage(CoordinatorStage.FETCHING_METADATA)
        await self._fetch_all(ctx)
        ctx.download_queue.close()

        self._set_stage(CoordinatorStage.DOWNLOADING)
        await dispatcher_task
        ctx.messages.close()

        totals = await aggregator_task
        self._finished_at = datetime.now(timezone.utc)
        self._set_stage(CoordinatorStage.REPORTING_DONE)
        return totals

    async def _fetch_all(self, ctx: PipelineContext) -> None:
        fetcher = MetadataFetcher(ctx)
        feeds = list(ctx.options.feeds)
        tasks = [asyncio.create_task(fetcher.fetch(feed), name=f"rmc-fetch-{feed}") for feed in feeds]

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for feed, result in zip(feeds, results):
            if isinstance(result, BaseException):
                # Isolated to this feed; siblings already ran to completion.
                logger.error("r/%s: metadata fetch crashed: %r", feed, result)

    async def _dispatch_downloads(self, ctx: PipelineContext) -> None:
        workers: set[asyncio.Task[None]] = set()

        async for candidate in ctx.download_queue:
            await ctx.admission.acquire()
            task = asyncio.create_task(self._download_one(ctx, candidate), name=f"rmc-download-{candidate.image_id}")
            workers.add(task)
            task.add_done_callback(workers.discard)

        if workers:
            await asyncio.gather(*list(workers))

    async def _download_one(self, ctx: PipelineContext, candidate: ImageCandidate) -> None:
        """Worker body; the admission unit acquired by the dispatcher is released here."""
        try:
            await ctx.messages.put(StateMessage(candidate=candidate, state=DownloadState.PENDING))
            try:
                outcome = await asyncio.to_thread(ctx.downloader.download, candidate)
            except Exception as exc:  # noqa: BLE001 - every candidate must end in one terminal message
                logger.exception("Download of %s crashed", candidate.link)
                outcome = DownloadOutcome(
                    state=DownloadState.FAILED,
                    candidate=candidate,
                    url=candidate.link,
                    error=str(exc),
                )
            await ctx.messages.put(StateMessage(candidate=candidate, state=outcome.state, outcome=outcome))
        finally:
            ctx.admission.release()


async def run_collection(options: ScrapeOptions, *, sink: Optional[ProgressSink] = None) -> ProgressTotals:
    return await Coordinator(options, sink=sink).run()
