"""
Running totals of a collection run.

All counters are monotonic. `scheduled` grows as fetchers enqueue candidates;
`downloaded + skipped + failed` never exceeds it and converges to it once every
stage has finished.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..download_state import DownloadState
from .metrics import compute_avg_speed


@dataclass
class ProgressTotals:
    scheduled: int = 0
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0

    # Informational
    bytes_downloaded: int = 0

    def schedule(self, count: int) -> None:
        if count < 0:
            raise ValueError("scheduled count must be >= 0")
        self.scheduled += count

    def record(self, state: DownloadState) -> int:
        """
        Count one terminal state.

        Returns:
            The counter delta (1 for terminal states, 0 for Pending).
        """
        if state == DownloadState.SUCCESS:
            self.downloaded += 1
        elif state == DownloadState.SKIPPED:
            self.skipped += 1
        elif state == DownloadState.FAILED:
            self.failed += 1
        else:
            return 0
        return 1

    @property
    def processed(self) -> int:
        return self.downloaded + self.skipped + self.failed

    @property
    def is_complete(self) -> bool:
        return self.processed == self.scheduled

    def copy(self) -> "ProgressTotals":
        return ProgressTotals(
            scheduled=self.scheduled,
            downloaded=self.downloaded,
            skipped=self.skipped,
            failed=self.failed,
            bytes_downloaded=self.bytes_downloaded,
        )

    def summary_line(self, runtime_s: Optional[float] = None) -> str:
        line = (
            f"{self.scheduled} images processed. "
            f"Downloaded {self.downloaded}, skipped {self.skipped} and failed {self.failed}."
        )
        if runtime_s is None:
            return line
        speed = compute_avg_speed(self.processed, runtime_s)
        return f"{line} Took {runtime_s:.1f}s ({speed:.2f} images/s)."

    def to_dict(self) -> dict[str, Any]:
        return {
            "scheduled": self.scheduled,
            "downloaded": self.downloaded,
            "skipped": self.skipped,
            "failed": self.failed,
            "bytes_downloaded": self.bytes_downloaded,
        }
