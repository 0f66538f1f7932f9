from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from .runs.api import create_runs_router
from .runs.manager import RunManager
from .settings.api import create_settings_router
from .settings.store import SettingsStore


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def create_app(data_dir: Optional[Path] = None) -> FastAPI:
    data_dir = Path(data_dir) if data_dir is not None else _repo_root() / "data"

    store = SettingsStore(path=data_dir / "config.json")
    manager = RunManager(store=store, runs_dir=data_dir / "runs")

    app = FastAPI(title="reddit-media-collector")
    app.include_router(create_settings_router(store=store))
    app.include_router(create_runs_router(manager=manager))

    app.state.settings_store = store
    app.state.run_manager = manager
    app.state.data_dir = data_dir
    return app


app = create_app()
