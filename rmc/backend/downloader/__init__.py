"""
Download stage.

Provides:
- Per-feed image id deduplication (dedup.py)
- Global admission control for concurrent transfers (admission.py)
- Single image transfer with skip/fail semantics (downloader.py)
"""

from .admission import AdmissionController
from .dedup import DedupRegistry, FeedDedupSet
from .downloader import DownloadOutcome, ImageDownloader

__all__ = [
    "AdmissionController",
    "DedupRegistry",
    "DownloadOutcome",
    "FeedDedupSet",
    "ImageDownloader",
]
