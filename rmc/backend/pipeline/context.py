from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from rmc.shared.filter_engine.models import ImageCandidate

from ..downloader.admission import AdmissionController
from ..downloader.dedup import DedupRegistry
from ..downloader.downloader import ImageDownloader
from ..fs.storage import FeedStorageManager
from ..settings.models import ScrapeOptions
from .channel import Channel
from .messages import PipelineMessage


# (listing url) -> raw listing bytes; raises NetworkError
FetchListingFunc = Callable[[str], bytes]


@dataclass
class PipelineContext:
    """
    Everything one run shares between stages.

    Built by the coordinator per run and passed to every stage; nothing here
    outlives the run.
    """

    options: ScrapeOptions
    storage: FeedStorageManager
    dedup: DedupRegistry
    admission: AdmissionController
    downloader: ImageDownloader
    fetch_listing: FetchListingFunc
    download_queue: Channel[ImageCandidate]
    messages: Channel[PipelineMessage]
