"""
Output directory layout.

    <output_root>/<feed>/<filename>     (default)
    <output_root>/<filename>            (root folder only)
"""

from __future__ import annotations

from pathlib import Path
from typing import IO


class FilesystemError(OSError):
    """A directory or destination file could not be created."""


class FeedStorageManager:
    def __init__(self, output_root: Path, *, root_folder_only: bool = False) -> None:
        self._output_root = Path(output_root)
        self._root_folder_only = bool(root_folder_only)

    @property
    def output_root(self) -> Path:
        return self._output_root

    @property
    def root_folder_only(self) -> bool:
        return self._root_folder_only

    def feed_dir(self, feed: str) -> Path:
        """Directory where a feed's files land."""
        if self._root_folder_only:
            return self._output_root
        return self._output_root / feed

    def ensure_feed_dir(self, feed: str) -> Path:
        """
        Create the feed directory if needed.

        Raises:
            FilesystemError: If the directory cannot be created.
        """
        directory = self.feed_dir(feed)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"cannot create directory {directory}: {exc}") from exc
        return directory

    def destination(self, feed: str, filename: str) -> Path:
        return self.feed_dir(feed) / filename

    def create_file(self, path: Path) -> IO[bytes]:
        """
        Create `path` for writing; never truncates an existing file.

        Raises:
            FileExistsError: If the file already exists.
            FilesystemError: If the file cannot be created for any other reason.
        """
        try:
            return open(path, "xb")
        except FileExistsError:
            raise
        except OSError as exc:
            raise FilesystemError(f"cannot create file {path}: {exc}") from exc

    def list_files(self, feed: str) -> list[Path]:
        directory = self.feed_dir(feed)
        if not directory.exists():
            return []
        return sorted(f for f in directory.iterdir() if f.is_file())
