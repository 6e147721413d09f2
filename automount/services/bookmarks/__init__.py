"""
Bookmark Module

- GtkBookmarkSource: reads remote bookmarks from the GTK bookmark list
- LocationSettingsRepository: persisted per-location settings blob
- BookmarkStore: merged in-memory Location set with carried-forward counters
"""

from .bookmark_source import GtkBookmarkSource, parse_bookmark_lines
from .bookmark_store import BookmarkStore
from .settings_repository import (
    LocationSettingsRepository,
    parse_location_settings,
    serialize_location_settings,
)

__all__ = [
    "BookmarkStore",
    "GtkBookmarkSource",
    "LocationSettingsRepository",
    "parse_bookmark_lines",
    "parse_location_settings",
    "serialize_location_settings",
]
