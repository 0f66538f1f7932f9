"""
Run status enum shared by the run manager and its HTTP API.

Idle / Running / Done / Failed
"""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    IDLE = "Idle"
    RUNNING = "Running"
    DONE = "Done"
    FAILED = "Failed"

    def is_active(self) -> bool:
        return self is TaskStatus.RUNNING
