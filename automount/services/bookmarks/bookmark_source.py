"""Reads the GTK bookmark list that file managers write."""

import logging
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os

from ...models import BookmarkEntry

LOCAL_FILE_SCHEME = "file://"


def parse_bookmark_lines(content: str) -> List[BookmarkEntry]:
    """
    Parse bookmark file content into entries, keeping file order.

    Each relevant line is ``<uri> [display name...]``. Blank lines, lines
    without a scheme and local ``file://`` bookmarks are skipped.
    """
    entries: List[BookmarkEntry] = []
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or "://" not in stripped or stripped.startswith(LOCAL_FILE_SCHEME):
            continue

        uri, _, name = stripped.partition(" ")
        raw_name: Optional[str] = name.strip() or None
        entries.append(BookmarkEntry(uri=uri, raw_name=raw_name))

    return entries


class GtkBookmarkSource:
    """BookmarkSource backed by ``~/.config/gtk-3.0/bookmarks``."""

    def __init__(self, bookmarks_path: Path):
        self._path = Path(bookmarks_path)

    @property
    def path(self) -> Path:
        return self._path

    async def load_locations(self) -> List[BookmarkEntry]:
        """Return remote bookmarks in file order. A missing file means no bookmarks."""
        if not await aiofiles.os.path.exists(self._path):
            logging.debug(f"Bookmark file not found: {self._path}")
            return []

        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8", errors="replace") as f:
                content = await f.read()
        except OSError as e:
            logging.error(f"Error loading bookmarks from {self._path}: {e}")
            return []

        entries = parse_bookmark_lines(content)
        logging.debug(f"Loaded {len(entries)} remote bookmarks from {self._path}")
        return entries
