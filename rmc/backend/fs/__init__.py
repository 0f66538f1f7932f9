"""
File system layout for downloaded media.

Provides:
- Output directory layout (storage.py)
- File naming derived from links (naming.py)
"""

from .naming import filename_for_link, rewrite_gifv
from .storage import FeedStorageManager, FilesystemError

__all__ = [
    "FeedStorageManager",
    "FilesystemError",
    "filename_for_link",
    "rewrite_gifv",
]
