from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode

from rmc.shared.validators.feed_name import FRONTPAGE_FEED

from ..settings.models import ScrapeOptions, validate_page_type


REDDIT_HOST = "https://www.reddit.com"
DEFAULT_CURSOR = "0"


@dataclass(frozen=True)
class Feed:
    """A feed plus the listing parameters resolved for this run."""

    name: str
    page_type: str
    limit: int
    after: str = DEFAULT_CURSOR

    @property
    def is_front_page(self) -> bool:
        return self.name == FRONTPAGE_FEED

    @classmethod
    def from_options(cls, name: str, options: ScrapeOptions) -> "Feed":
        return cls(name=name, page_type=options.page_type, limit=options.image_limit)


def split_page_type(page_type: str) -> tuple[str, str | None]:
    """
    `top-week` -> (`top`, `week`); `hot` -> (`hot`, None).

    Raises:
        ConfigurationError: If the page type is not supported.
    """
    value = validate_page_type(page_type)
    if "-" in value:
        base, span = value.split("-", 1)
        return base, span
    return value, None


def build_listing_url(feed: Feed, *, host: str = REDDIT_HOST) -> str:
    """
    Build the JSON listing URL for a feed.

        <host>/r/<feed>/<page>.json?limit=<n>&after=<cursor>[&t=<span>]
        <host>/<page>.json?...                  (front page)
    """
    page, span = split_page_type(feed.page_type)

    params: dict[str, str | int] = {"limit": feed.limit, "after": feed.after}
    if span:
        params["t"] = span
    query = urlencode(params)

    host = host.rstrip("/")
    if feed.is_front_page:
        return f"{host}/{page}.json?{query}"
    return f"{host}/r/{feed.name}/{page}.json?{query}"
