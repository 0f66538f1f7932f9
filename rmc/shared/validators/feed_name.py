"""
Feed name validation and normalization.

Accepted inputs (all normalize to `pics`):
- `pics`
- `r/pics`, `/r/pics`, `/r/pics/`
- `https://www.reddit.com/r/pics`, `https://old.reddit.com/r/pics/hot/`

Combined listings (`pics+aww`) are kept as one feed when every part is valid.

The special `frontpage` token is accepted as-is and targets the aggregate listing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse


FRONTPAGE_FEED = "frontpage"

# Subreddit names: letters, digits, underscore, length 2-21
FEED_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{2,21}$")
MULTI_FEED_SEPARATOR = "+"

_REDDIT_HOSTS = ("reddit.com", "www.reddit.com", "old.reddit.com", "new.reddit.com")


@dataclass(frozen=True)
class ValidationResult:
    """Feed name validation result."""

    valid: bool
    feed: Optional[str] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


def _name_error(name: str) -> Optional[str]:
    if FEED_NAME_PATTERN.match(name):
        return None
    if len(name) > 21:
        return f"feed name too long ({len(name)} > 21): {name}"
    invalid_chars = set(re.findall(r"[^A-Za-z0-9_]", name))
    if invalid_chars:
        return f"feed name contains invalid characters: {', '.join(sorted(invalid_chars))}"
    return f"invalid feed name: {name!r}"


def _strip_feed_prefix(path: str) -> str:
    path = path.strip("/")
    if path.lower().startswith("r/"):
        path = path[2:]
    # Drop trailing listing segments such as `/hot` or `/top`.
    return path.split("/", 1)[0]


def validate_feed_name(value: str) -> ValidationResult:
    """
    Validate a feed identifier and return its normalized name.

    Args:
        value: Raw feed name, `r/<name>` form, or a listing URL.

    Returns:
        ValidationResult with `feed` on success and `error` on failure.
    """
    if not value or not value.strip():
        return ValidationResult(valid=False, error="feed name must not be empty")

    raw = value.strip()

    if raw.lower() == FRONTPAGE_FEED:
        return ValidationResult(valid=True, feed=FRONTPAGE_FEED)

    if "://" in raw:
        parsed = urlparse(raw)
        if parsed.netloc.lower() not in _REDDIT_HOSTS:
            return ValidationResult(valid=False, error=f"unsupported host: {parsed.netloc or '<empty>'}")
        if not parsed.path.strip("/").lower().startswith("r/"):
            return ValidationResult(valid=False, error="URL does not point at a subreddit (/r/<name>)")
        name = _strip_feed_prefix(parsed.path)
    else:
        name = _strip_feed_prefix(raw)

    # `pics+aww` is a combined listing; every part must be a valid name.
    for part in name.split(MULTI_FEED_SEPARATOR):
        error = _name_error(part)
        if error:
            return ValidationResult(valid=False, error=error)

    return ValidationResult(valid=True, feed=name)


def normalize_feed_names(values: list[str]) -> tuple[list[str], list[str]]:
    """
    Normalize a list of feed identifiers, dropping duplicates (first wins).

    Returns:
        (feeds, errors)
    """
    feeds: list[str] = []
    errors: list[str] = []
    seen: set[str] = set()

    for value in values:
        result = validate_feed_name(value)
        if not result:
            errors.append(f"{value!r}: {result.error}")
            continue
        key = (result.feed or "").lower()
        if key in seen:
            continue
        seen.add(key)
        feeds.append(result.feed or "")

    return feeds, errors
