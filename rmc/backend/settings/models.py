from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from rmc.shared.validators.feed_name import FRONTPAGE_FEED, normalize_feed_names


DEFAULT_OUTPUT_DIRECTORY = "downloads"
DEFAULT_IMAGE_LIMIT = 50
MAX_IMAGE_LIMIT = 100
DEFAULT_PAGE_TYPE = "hot"
DEFAULT_MAX_CONCURRENT_DOWNLOADS = 3

# Listing page types served by the feed host. `top` and `controversial` take an
# optional `-<span>` suffix which becomes the `t=` query parameter.
SUPPORTED_PAGE_TYPES = frozenset(
    {
        "hot",
        "new",
        "rising",
        "best",
        "top",
        "top-hour",
        "top-day",
        "top-week",
        "top-month",
        "top-year",
        "top-all",
        "controversial",
        "controversial-hour",
        "controversial-day",
        "controversial-week",
        "controversial-month",
        "controversial-year",
        "controversial-all",
    }
)

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Invalid run configuration; raised before any network activity."""


def validate_page_type(page_type: str) -> str:
    value = (page_type or "").strip().lower()
    if value not in SUPPORTED_PAGE_TYPES:
        raise ConfigurationError(
            f"Invalid page type {page_type!r}; expected one of: {', '.join(sorted(SUPPORTED_PAGE_TYPES))}"
        )
    return value


def clamp_image_limit(limit: int) -> int:
    if limit > MAX_IMAGE_LIMIT:
        logger.warning("Option 'limit' is enforced to %d or less (got %d)", MAX_IMAGE_LIMIT, limit)
        return MAX_IMAGE_LIMIT
    if limit <= 0:
        return DEFAULT_IMAGE_LIMIT
    return limit


@dataclass
class ScrapeOptions:
    """
    Options for one collection run.

    Call `normalized()` before handing the options to the coordinator; it is
    the single place where configuration errors are raised.
    """

    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    image_limit: int = DEFAULT_IMAGE_LIMIT
    front_page: bool = False
    page_type: str = DEFAULT_PAGE_TYPE
    feeds: list[str] = field(default_factory=list)
    max_concurrent_downloads: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS
    root_folder_only: bool = False

    def normalized(self) -> "ScrapeOptions":
        page_type = validate_page_type(self.page_type)

        try:
            max_concurrent = int(self.max_concurrent_downloads)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"max concurrent downloads must be an integer: {exc}") from exc
        if max_concurrent < 1:
            raise ConfigurationError("max concurrent downloads must be >= 1")

        if not str(self.output_directory or "").strip():
            raise ConfigurationError("output directory must not be empty")

        raw_feeds = list(self.feeds)
        if self.front_page:
            raw_feeds.append(FRONTPAGE_FEED)

        feeds, errors = normalize_feed_names(raw_feeds)
        for error in errors:
            logger.warning("Skipping feed %s", error)
        if not feeds:
            detail = " (invalid: " + "; ".join(errors) + ")" if errors else ""
            raise ConfigurationError("at least one subreddit or the front page is required" + detail)

        return replace(
            self,
            image_limit=clamp_image_limit(int(self.image_limit)),
            page_type=page_type,
            feeds=feeds,
            max_concurrent_downloads=max_concurrent,
            front_page=FRONTPAGE_FEED in feeds,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_directory": self.output_directory,
            "image_limit": self.image_limit,
            "front_page": self.front_page,
            "page_type": self.page_type,
            "feeds": list(self.feeds),
            "max_concurrent_downloads": self.max_concurrent_downloads,
            "root_folder_only": self.root_folder_only,
        }


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class GlobalSettings:
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    image_limit: int = DEFAULT_IMAGE_LIMIT
    page_type: str = DEFAULT_PAGE_TYPE
    max_concurrent_downloads: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS
    root_folder_only: bool = False
    front_page: bool = False

    def to_options(self, feeds: list[str], *, front_page: Optional[bool] = None) -> ScrapeOptions:
        return ScrapeOptions(
            output_directory=self.output_directory,
            image_limit=self.image_limit,
            front_page=self.front_page if front_page is None else front_page,
            page_type=self.page_type,
            feeds=list(feeds),
            max_concurrent_downloads=self.max_concurrent_downloads,
            root_folder_only=self.root_folder_only,
        )

    def to_persist_dict(self) -> dict[str, Any]:
        return {
            "version": 1,
            "output_directory": self.output_directory,
            "image_limit": self.image_limit,
            "page_type": self.page_type,
            "max_concurrent_downloads": self.max_concurrent_downloads,
            "root_folder_only": self.root_folder_only,
            "front_page": self.front_page,
        }

    @classmethod
    def from_persist_dict(cls, data: dict[str, Any]) -> "GlobalSettings":
        output_directory = str(data.get("output_directory") or DEFAULT_OUTPUT_DIRECTORY)

        page_type = str(data.get("page_type") or DEFAULT_PAGE_TYPE).strip().lower()
        if page_type not in SUPPORTED_PAGE_TYPES:
            page_type = DEFAULT_PAGE_TYPE

        max_concurrent = _as_int(data.get("max_concurrent_downloads"), DEFAULT_MAX_CONCURRENT_DOWNLOADS)

        return cls(
            output_directory=output_directory,
            image_limit=_as_int(data.get("image_limit"), DEFAULT_IMAGE_LIMIT),
            page_type=page_type,
            max_concurrent_downloads=max(1, max_concurrent),
            root_folder_only=bool(data.get("root_folder_only", False)),
            front_page=bool(data.get("front_page", False)),
        )
