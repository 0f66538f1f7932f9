"""
Run timing helpers.

Timestamps may be naive (treated as UTC) or aware; results are in seconds.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def compute_runtime_s(
    started_at: Optional[datetime],
    finished_at: Optional[datetime],
    *,
    now: Optional[datetime] = None,
) -> float:
    """
    Seconds between start and finish.

    Not started -> 0.0; still running -> measured up to `now` (default: the
    current time). Never negative.
    """
    if started_at is None:
        return 0.0

    end = finished_at or now or datetime.now(timezone.utc)
    elapsed = as_utc(end) - as_utc(started_at)
    return max(0.0, elapsed.total_seconds())


def compute_avg_speed(processed: int, runtime_s: float) -> float:
    """Items per second over the whole run; 0.0 until time has passed."""
    if runtime_s <= 0:
        return 0.0
    return processed / runtime_s
