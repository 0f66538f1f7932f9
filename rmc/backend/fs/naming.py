"""
Media file naming.

Filename = final path segment of the (possibly rewritten) link, e.g.
`https://i.imgur.com/abc123.gifv` -> link rewritten to `.../abc123.mp4`,
stored as `abc123.mp4`.
"""

from __future__ import annotations


GIFV_SUFFIX = "gifv"
MP4_SUFFIX = "mp4"


def rewrite_gifv(link: str) -> str:
    """
    Replace a trailing literal `gifv` with `mp4`.

    gifv pages need extra processing to play on desktop machines while the mp4
    behind them plays everywhere.
    """
    if link.endswith(GIFV_SUFFIX):
        return link[: -len(GIFV_SUFFIX)] + MP4_SUFFIX
    return link


def filename_for_link(link: str) -> str:
    """
    Final path segment of a link, used verbatim as the stored filename.

    Raises:
        ValueError: If the link has no usable final segment.
    """
    name = link.split("/")[-1]
    if not name or name in (".", ".."):
        raise ValueError(f"link has no filename segment: {link!r}")
    return name
