"""
Listing filter (pure logic).

Input: raw `ListingEntry` items in listing order
Output: `ImageCandidate` items for direct image links, in the same order

Rules:
- keep entries whose domain contains "imgur" OR whose post hint contains "image"
- AND whose URL's final path segment contains a "." (drops galleries and
  extension-less pages)
- image id = final path segment up to its first "."; entries with an empty
  image id are dropped
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .models import REDDIT_BASE_URL, Author, ImageCandidate, ListingEntry


def final_path_segment(url: str) -> str:
    return url.split("/")[-1]


def extract_image_id(url: Optional[str]) -> str:
    if not url:
        return ""
    return final_path_segment(url).split(".")[0].strip()


def looks_like_image_host(entry: ListingEntry) -> bool:
    if entry.domain is not None and "imgur" in entry.domain:
        return True
    if entry.post_hint is not None and "image" in entry.post_hint:
        return True
    return False


def is_direct_link(url: Optional[str]) -> bool:
    if not url:
        return False
    return "." in final_path_segment(url)


def _post_link(permalink: Optional[str]) -> str:
    if not permalink:
        return ""
    if permalink.startswith("/"):
        return REDDIT_BASE_URL + permalink
    return permalink


def to_candidate(entry: ListingEntry, *, feed: str) -> ImageCandidate:
    url = entry.url or ""
    return ImageCandidate(
        id=entry.id or "",
        image_id=extract_image_id(url),
        link=url,
        feed=feed,
        author=Author.from_name(entry.author),
        title=entry.title or "",
        post_link=_post_link(entry.permalink),
        subreddit=entry.subreddit or "",
        source=entry.domain or "",
    )


def iter_image_candidates(entries: Iterable[ListingEntry], *, feed: str) -> Iterable[ImageCandidate]:
    for entry in entries:
        if not looks_like_image_host(entry):
            continue
        if not is_direct_link(entry.url):
            continue

        candidate = to_candidate(entry, feed=feed)
        if not candidate.image_id:
            continue
        yield candidate


def filter_image_candidates(entries: Sequence[ListingEntry], *, feed: str) -> tuple[ImageCandidate, ...]:
    """
    Filter a listing down to direct image candidates, keeping listing order.

    Duplicates are NOT removed here; per-feed dedup is owned by the fetcher.
    """
    return tuple(iter_image_candidates(entries, feed=feed))
