"""
Progress aggregation and rendering.

The aggregator is the only writer of the run's `ProgressTotals`: fetchers and
workers report through the message channel, the aggregator counts and forwards
display updates to a `ProgressSink`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import IO, Optional, Protocol

from tqdm import tqdm

from rmc.shared.stats.metrics import compute_runtime_s
from rmc.shared.stats.totals import ProgressTotals

from .channel import Channel
from .messages import PipelineMessage, ScheduledMessage, StateMessage


logger = logging.getLogger(__name__)


class ProgressSink(Protocol):
    def set_total(self, total: int) -> None: ...

    def update(self, description: str, advance: int) -> None: ...

    def finish(self, summary: str) -> None: ...


class NullProgressSink:
    """Renders nothing; totals are read from the aggregator instead."""

    def set_total(self, total: int) -> None:
        pass

    def update(self, description: str, advance: int) -> None:
        pass

    def finish(self, summary: str) -> None:
        pass


class TqdmProgressSink:
    """
    Terminal progress bar.

    The total grows while listings are still being fetched, so the bar starts
    empty and is re-rendered on every schedule.
    """

    def __init__(
        self,
        *,
        file: Optional[IO[str]] = None,
        summary_file: Optional[IO[str]] = None,
        disable: bool = False,
    ) -> None:
        self._summary_file = summary_file
        self._bar = tqdm(
            total=0,
            desc="Fetching listings",
            unit="img",
            file=file,
            disable=disable,
            dynamic_ncols=True,
        )

    def set_total(self, total: int) -> None:
        self._bar.total = total
        self._bar.refresh()

    def update(self, description: str, advance: int) -> None:
        self._bar.set_description_str(description, refresh=False)
        if advance:
            self._bar.update(advance)
        else:
            self._bar.refresh()

    def finish(self, summary: str) -> None:
        self._bar.close()
        # Written even when the bar is disabled.
        tqdm.write(summary, file=self._summary_file)


class ProgressAggregator:
    """
    Consumes pipeline messages until the channel is closed and drained.

    - ScheduledMessage: raises `scheduled`, grows the display total
    - Pending StateMessage: display only
    - terminal StateMessage: exactly one counter +1, display advances by one
    """

    def __init__(
        self,
        messages: Channel[PipelineMessage],
        sink: Optional[ProgressSink] = None,
        *,
        started_at: Optional[datetime] = None,
    ) -> None:
        self._messages = messages
        self._started_at = started_at
        self._runtime_s: Optional[float] = None
        self._sink: ProgressSink = sink or NullProgressSink()
        self._totals = ProgressTotals()
        self._complete = False

    @property
    def totals(self) -> ProgressTotals:
        """Snapshot of the running totals."""
        return self._totals.copy()

    @property
    def runtime_s(self) -> Optional[float]:
        """Seconds from `started_at` to the end of the stream; None while running or without `started_at`."""
        return self._runtime_s

    @property
    def complete(self) -> bool:
        return self._complete

    async def run(self) -> ProgressTotals:
        async for message in self._messages:
            self.handle(message)

        if self._started_at is not None:
            self._runtime_s = compute_runtime_s(self._started_at, None)
        summary = self._totals.summary_line(self._runtime_s)
        self._sink.finish(summary)
        self._complete = True
        return self._totals.copy()

    def handle(self, message: PipelineMessage) -> None:
        if isinstance(message, ScheduledMessage):
            self._totals.schedule(message.count)
            self._sink.set_total(self._totals.scheduled)
            return

        if isinstance(message, StateMessage):
            delta = self._totals.record(message.state)
            if delta and message.outcome is not None:
                self._totals.bytes_downloaded += message.outcome.bytes_written
            self._sink.update(message.describe(), delta)
            return

        logger.error("Ignoring unknown pipeline message: %r", message)
