"""
Stable domain models for listing filtering (pure logic layer).

- `ListingEntry`: one feed entry as delivered by the feed host, every field optional
- `ImageCandidate`: an entry believed to reference a direct, downloadable image
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional


REDDIT_BASE_URL = "https://www.reddit.com"


@dataclass(frozen=True)
class ListingEntry:
    title: Optional[str] = None
    domain: Optional[str] = None
    id: Optional[str] = None
    author: Optional[str] = None
    permalink: Optional[str] = None
    post_hint: Optional[str] = None
    url: Optional[str] = None
    subreddit: Optional[str] = None

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ListingEntry":
        def opt(key: str) -> Optional[str]:
            value = data.get(key)
            return str(value) if value is not None else None

        return ListingEntry(
            title=opt("title"),
            domain=opt("domain"),
            id=opt("id"),
            author=opt("author"),
            permalink=opt("permalink"),
            post_hint=opt("post_hint"),
            url=opt("url"),
            subreddit=opt("subreddit"),
        )


@dataclass(frozen=True)
class Author:
    name: str
    link: str

    @staticmethod
    def from_name(name: Optional[str]) -> "Author":
        name = name or ""
        link = f"{REDDIT_BASE_URL}/user/{name}/" if name else ""
        return Author(name=name, link=link)


@dataclass(frozen=True)
class ImageCandidate:
    """
    A listing entry that survived filtering.

    `image_id` is the stable dedup key (final URL path segment up to the first dot).
    `feed` is the feed the candidate was scheduled under, which decides the output
    folder; it differs from `subreddit` for front page entries.
    """

    id: str
    image_id: str
    link: str
    feed: str
    author: Author
    title: str = ""
    post_link: str = ""
    subreddit: str = ""
    source: str = ""

    def for_feed(self, feed: str) -> "ImageCandidate":
        return replace(self, feed=feed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "image_id": self.image_id,
            "link": self.link,
            "feed": self.feed,
            "author": self.author.name,
            "title": self.title,
            "post_link": self.post_link,
            "subreddit": self.subreddit,
            "source": self.source,
        }
