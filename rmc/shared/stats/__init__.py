from __future__ import annotations

from .metrics import compute_avg_speed, compute_runtime_s
from .totals import ProgressTotals

__all__ = [
    "ProgressTotals",
    "compute_avg_speed",
    "compute_runtime_s",
]
