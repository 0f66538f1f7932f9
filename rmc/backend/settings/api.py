from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from .models import MAX_IMAGE_LIMIT, ConfigurationError, GlobalSettings, validate_page_type
from .store import SettingsStore


class SettingsIn(BaseModel):
    output_directory: Optional[str] = Field(default=None, min_length=1)
    image_limit: Optional[int] = Field(default=None, ge=1, le=MAX_IMAGE_LIMIT)
    page_type: Optional[str] = None
    max_concurrent_downloads: Optional[int] = Field(default=None, ge=1, le=64)
    root_folder_only: Optional[bool] = None
    front_page: Optional[bool] = None


class SettingsOut(BaseModel):
    output_directory: str
    image_limit: int
    page_type: str
    max_concurrent_downloads: int
    root_folder_only: bool
    front_page: bool


def _public_settings(settings: GlobalSettings) -> SettingsOut:
    return SettingsOut(
        output_directory=settings.output_directory,
        image_limit=settings.image_limit,
        page_type=settings.page_type,
        max_concurrent_downloads=settings.max_concurrent_downloads,
        root_folder_only=settings.root_folder_only,
        front_page=settings.front_page,
    )


def create_settings_router(*, store: SettingsStore) -> APIRouter:
    router = APIRouter(prefix="/api/settings", tags=["settings"])

    @router.get("", response_model=SettingsOut)
    def get_settings() -> SettingsOut:
        return _public_settings(store.load())

    @router.put("", response_model=SettingsOut)
    def put_settings(body: SettingsIn) -> SettingsOut:
        changes = body.model_dump(exclude_none=True)
        if "page_type" in changes:
            try:
                changes["page_type"] = validate_page_type(changes["page_type"])
            except ConfigurationError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc

        return _public_settings(store.update(**changes))

    return router
