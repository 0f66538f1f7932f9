from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Optional

from rmc.shared.task_status import TaskStatus

from ..pipeline.coordinator import Coordinator, CoordinatorStage
from ..settings.store import SettingsStore
from .models import RunRecord, utc_now


logger = logging.getLogger(__name__)


class RunConflictError(RuntimeError):
    pass


CoordinatorFactory = Callable[..., Coordinator]


class RunManager:
    """
    Starts collection runs in the background, one at a time.

    - options come from the settings store plus the requested feeds
    - configuration errors surface synchronously from `start`
    - the latest run stays visible through `snapshot` after it finished
    """

    def __init__(
        self,
        *,
        store: SettingsStore,
        runs_dir: Path,
        coordinator_factory: Optional[CoordinatorFactory] = None,
    ) -> None:
        self._store = store
        self._runs_dir = Path(runs_dir)
        self._factory: CoordinatorFactory = coordinator_factory or Coordinator

        self._lock = asyncio.Lock()
        self._current: Optional[RunRecord] = None
        self._coordinator: Optional[Coordinator] = None
        self._task: Optional[asyncio.Task[None]] = None

    async def start(self, *, feeds: list[str], front_page: Optional[bool] = None) -> RunRecord:
        async with self._lock:
            if self._current is not None and self._current.status.is_active():
                raise RunConflictError(f"run {self._current.run_id} is still running")

            options = self._store.load().to_options(feeds, front_page=front_page)
            # Raises ConfigurationError before anything is scheduled.
            coordinator = self._factory(options, on_stage=self._on_stage)

            now = utc_now()
            run = RunRecord(
                run_id=str(uuid.uuid4()),
                feeds=list(coordinator.options.feeds),
                options=coordinator.options.to_dict(),
                status=TaskStatus.RUNNING,
                created_at=now,
                updated_at=now,
            )
            self._current = run
            self._coordinator = coordinator
            self._persist_run(run)

            self._task = asyncio.create_task(self._run_wrapper(run, coordinator), name=f"rmc-run-{run.run_id}")
            return run

    async def snapshot(self) -> dict[str, Any]:
        async with self._lock:
            run = self._current
            if run is None:
                return {"status": TaskStatus.IDLE.value, "run": None}

            if self._coordinator is not None and run.status.is_active():
                run.totals = self._coordinator.totals
            return {"status": run.status.value, "run": run.to_public_dict()}

    async def wait(self) -> None:
        """Wait for the current run (if any) to finish."""
        task = self._task
        if task is not None:
            await asyncio.shield(task)

    def _on_stage(self, stage: CoordinatorStage) -> None:
        run = self._current
        if run is None:
            return
        run.stage = stage
        run.updated_at = utc_now()

    def _persist_run(self, run: RunRecord) -> None:
        try:
            self._runs_dir.mkdir(parents=True, exist_ok=True)
            path = self._runs_dir / f"{run.run_id}.json"
            path.write_text(json.dumps(run.to_public_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            # In-memory state is authoritative.
            logger.warning("Could not persist run %s: %s", run.run_id, exc)

    async def _run_wrapper(self, run: RunRecord, coordinator: Coordinator) -> None:
        error: Optional[str] = None
        try:
            totals = await coordinator.run()
            final_status = TaskStatus.DONE
        except Exception as exc:  # noqa: BLE001 - surfaced through the run snapshot
            logger.exception("Run %s failed", run.run_id)
            totals = coordinator.totals
            final_status = TaskStatus.FAILED
            error = str(exc)

        async with self._lock:
            run.totals = totals
            run.status = final_status
            run.error = error
            run.updated_at = utc_now()
            self._persist_run(run)
