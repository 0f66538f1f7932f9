"""
Single image transfer.

For one candidate:
1. rewrite a trailing `gifv` to `mp4`
2. resolve `<feed dir or root>/<final segment of rewritten link>`
3. existing file -> Skipped, no network call (re-runs are idempotent)
4. create the destination; failure -> Failed
5. stream GET into the file; failure -> Failed (the partial file stays)
6. Success

Failures are never raised; each call returns exactly one terminal outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http.client import HTTPException
from pathlib import Path
from typing import IO, Callable, ContextManager, Optional

from rmc.shared.download_state import DownloadState
from rmc.shared.filter_engine.models import ImageCandidate

from ..fs.naming import filename_for_link, rewrite_gifv
from ..fs.storage import FeedStorageManager, FilesystemError
from ..net.http import NetworkError, open_stream


logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024

# (url) -> context manager yielding a readable binary response
OpenStreamFunc = Callable[[str], ContextManager[IO[bytes]]]


@dataclass(frozen=True)
class DownloadOutcome:
    """Terminal result of one candidate."""

    state: DownloadState
    candidate: ImageCandidate
    url: str
    path: Optional[Path] = None
    bytes_written: int = 0
    error: Optional[str] = None


class ImageDownloader:
    """
    Blocking downloader; the pipeline calls `download` from worker threads.

    Usage:
        downloader = ImageDownloader(storage=FeedStorageManager(Path("downloads")))
        outcome = downloader.download(candidate)
    """

    def __init__(
        self,
        *,
        storage: FeedStorageManager,
        open_stream_func: Optional[OpenStreamFunc] = None,
    ) -> None:
        self._storage = storage
        self._open_stream: OpenStreamFunc = open_stream_func or open_stream

    @property
    def storage(self) -> FeedStorageManager:
        return self._storage

    def download(self, candidate: ImageCandidate) -> DownloadOutcome:
        url = rewrite_gifv(candidate.link)

        try:
            filename = filename_for_link(url)
        except ValueError as exc:
            return self._failed(candidate, url, None, str(exc))

        path = self._storage.destination(candidate.feed, filename)

        if path.exists():
            logger.debug("Skipping %s: %s already exists", url, path)
            return DownloadOutcome(state=DownloadState.SKIPPED, candidate=candidate, url=url, path=path)

        try:
            out = self._storage.create_file(path)
        except FileExistsError:
            # Another worker created the same file since the check above.
            return DownloadOutcome(state=DownloadState.SKIPPED, candidate=candidate, url=url, path=path)
        except FilesystemError as exc:
            return self._failed(candidate, url, path, str(exc))

        with out:
            try:
                written = self._copy(url, out)
            except NetworkError as exc:
                return self._failed(candidate, url, path, str(exc))
            except (OSError, HTTPException) as exc:
                return self._failed(candidate, url, path, f"copy failed: {exc}")

        return DownloadOutcome(
            state=DownloadState.SUCCESS,
            candidate=candidate,
            url=url,
            path=path,
            bytes_written=written,
        )

    def _copy(self, url: str, out: IO[bytes]) -> int:
        written = 0
        with self._open_stream(url) as resp:
            while True:
                chunk = resp.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
                written += len(chunk)
        return written

    def _failed(
        self,
        candidate: ImageCandidate,
        url: str,
        path: Optional[Path],
        error: str,
    ) -> DownloadOutcome:
        logger.warning("Failed downloading %s from r/%s: %s", url, candidate.feed, error)
        return DownloadOutcome(
            state=DownloadState.FAILED,
            candidate=candidate,
            url=url,
            path=path,
            error=error,
        )
