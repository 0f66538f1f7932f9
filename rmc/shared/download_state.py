"""
Per-item download lifecycle shared by the worker, the aggregator and the API.

Lifecycle: Pending -> Success | Skipped | Failed (no cycles).
"""

from __future__ import annotations

from enum import Enum


class DownloadState(str, Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    SKIPPED = "Skipped"
    FAILED = "Failed"

    def is_terminal(self) -> bool:
        return self is not DownloadState.PENDING

    @property
    def label(self) -> str:
        """Verb shown in the progress description."""
        return _LABELS[self]


_LABELS = {
    DownloadState.PENDING: "Downloading",
    DownloadState.SUCCESS: "Downloaded",
    DownloadState.SKIPPED: "Skipped",
    DownloadState.FAILED: "Failed downloading",
}
