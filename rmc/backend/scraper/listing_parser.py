"""
Listing payload parsing.

Expected shape (every field optional):

    { "data": { "children": [ { "data": { "title", "domain", "id", "author",
      "permalink", "post_hint", "url", "subreddit" } } ] } }

Children without a `data` object are skipped; unknown fields are ignored.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rmc.shared.filter_engine.models import ListingEntry


class ParseError(ValueError):
    """The listing payload is empty or malformed."""


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class ChildData(_Lenient):
    title: Optional[str] = None
    domain: Optional[str] = None
    id: Optional[str] = None
    author: Optional[str] = None
    permalink: Optional[str] = None
    post_hint: Optional[str] = None
    url: Optional[str] = None
    subreddit: Optional[str] = None


class Child(_Lenient):
    data: Optional[ChildData] = None


class ListingData(_Lenient):
    dist: Optional[int] = None
    after: Optional[str] = None
    children: list[Child] = Field(default_factory=list)


class Listing(_Lenient):
    data: Optional[ListingData] = None


def parse_listing(payload: bytes | str) -> Listing:
    """
    Raises:
        ParseError: If the payload is empty, not JSON, or does not fit the shape.
    """
    if payload is None or not payload.strip():
        raise ParseError("empty listing payload")

    try:
        return Listing.model_validate_json(payload)
    except ValidationError as exc:
        raise ParseError(f"malformed listing payload: {exc.error_count()} error(s)") from exc


def listing_entries(listing: Listing) -> tuple[ListingEntry, ...]:
    if listing.data is None:
        return ()

    entries = []
    for child in listing.data.children:
        if child.data is None:
            continue
        entries.append(ListingEntry.from_dict(child.data.model_dump()))
    return tuple(entries)


def parse_listing_entries(payload: bytes | str) -> tuple[ListingEntry, ...]:
    return listing_entries(parse_listing(payload))
