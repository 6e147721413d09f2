import logging
from typing import Dict, List, Optional

from .bookmark_source import GtkBookmarkSource
from .settings_repository import LocationSettingsRepository
from ...models import Location, LocationSettings
from ...utils import derive_display_name


class BookmarkStore:
    """
    In-memory set of Locations, rebuilt from the bookmark list on every reload.

    Persisted settings are merged onto each Location by uri. The runtime
    counters fail_count and last_attempt_at are carried forward from the
    previous set so a reload never resets the retry policy.
    """

    def __init__(
        self,
        bookmark_source: GtkBookmarkSource,
        settings_repository: LocationSettingsRepository,
    ):
        self._source = bookmark_source
        self._settings_repository = settings_repository
        self._locations: Dict[str, Location] = {}

    async def reload(self) -> List[Location]:
        entries = await self._source.load_locations()
        persisted = await self._settings_repository.load()

        previous = self._locations
        rebuilt: Dict[str, Location] = {}

        for entry in entries:
            if entry.uri in rebuilt:
                logging.debug(f"Duplicate bookmark ignored: {entry.uri}")
                continue

            location_settings = persisted.get(entry.uri, LocationSettings())
            old = previous.get(entry.uri)

            rebuilt[entry.uri] = Location(
                uri=entry.uri,
                display_name=entry.raw_name or derive_display_name(entry.uri),
                enabled=location_settings.enabled,
                alias_name=location_settings.alias_name,
                create_alias=location_settings.create_alias,
                fail_count=old.fail_count if old else 0,
                last_attempt_at=old.last_attempt_at if old else None,
            )

        removed = set(previous) - set(rebuilt)
        if removed:
            logging.info(f"Bookmarks removed since last reload: {', '.join(sorted(removed))}")

        self._locations = rebuilt
        logging.debug(
            f"Reloaded {len(rebuilt)} location(s), "
            f"{sum(1 for loc in rebuilt.values() if loc.enabled)} enabled"
        )
        return self.get_all()

    def get(self, uri: str) -> Optional[Location]:
        return self._locations.get(uri)

    def get_all(self) -> List[Location]:
        return list(self._locations.values())

    def get_enabled(self) -> List[Location]:
        return [location for location in self._locations.values() if location.enabled]

    async def save_location_settings(self, uri: str, location_settings: LocationSettings) -> None:
        """Persist settings for one uri. Takes effect on the next reload."""
        await self._settings_repository.update(uri, location_settings)
