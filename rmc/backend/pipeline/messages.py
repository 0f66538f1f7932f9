from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from rmc.shared.download_state import DownloadState
from rmc.shared.filter_engine.models import ImageCandidate

from ..downloader.downloader import DownloadOutcome


@dataclass(frozen=True)
class ScheduledMessage:
    """A fetcher is about to enqueue `count` candidates for `feed`."""

    feed: str
    count: int


@dataclass(frozen=True)
class StateMessage:
    """A worker moved `candidate` into `state`."""

    candidate: ImageCandidate
    state: DownloadState
    outcome: Optional[DownloadOutcome] = None

    def describe(self) -> str:
        return f"{self.state.label} image {self.candidate.image_id} from r/{self.candidate.feed}..."


PipelineMessage = Union[ScheduledMessage, StateMessage]
