from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from rmc.shared.task_status import TaskStatus

from ..settings.models import ConfigurationError
from .manager import RunConflictError, RunManager


class RunRequestIn(BaseModel):
    feeds: list[str] = Field(default_factory=list)
    front_page: Optional[bool] = None


class TotalsOut(BaseModel):
    scheduled: int
    downloaded: int
    skipped: int
    failed: int
    bytes_downloaded: int


class RunOut(BaseModel):
    run_id: str
    feeds: list[str]
    status: TaskStatus
    stage: str
    created_at: str
    updated_at: str
    totals: TotalsOut
    error: Optional[str] = None
    options: dict[str, Any]


class RunStateOut(BaseModel):
    status: TaskStatus
    run: Optional[RunOut] = None


def create_runs_router(*, manager: RunManager) -> APIRouter:
    router = APIRouter(prefix="/api/runs", tags=["runs"])

    @router.post("", response_model=RunOut, status_code=202)
    async def start_run(body: RunRequestIn) -> RunOut:
        try:
            run = await manager.start(feeds=body.feeds, front_page=body.front_page)
        except RunConflictError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except ConfigurationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return RunOut(**run.to_public_dict())

    @router.get("/current", response_model=RunStateOut)
    async def current_run() -> RunStateOut:
        snap = await manager.snapshot()
        run = snap["run"]
        return RunStateOut(status=snap["status"], run=RunOut(**run) if run else None)

    return router
