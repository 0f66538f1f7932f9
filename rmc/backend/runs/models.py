from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from rmc.shared.stats.totals import ProgressTotals
from rmc.shared.task_status import TaskStatus

from ..pipeline.coordinator import CoordinatorStage


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_utc_z(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class RunRecord:
    run_id: str
    feeds: list[str]
    options: dict[str, Any]
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    stage: CoordinatorStage = CoordinatorStage.IDLE
    totals: ProgressTotals = field(default_factory=ProgressTotals)
    error: Optional[str] = None

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "feeds": list(self.feeds),
            "status": self.status.value,
            "stage": self.stage.value,
            "created_at": format_utc_z(self.created_at),
            "updated_at": format_utc_z(self.updated_at),
            "totals": self.totals.to_dict(),
            "error": self.error,
            "options": self.options,
        }
