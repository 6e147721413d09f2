"""Persistence of the per-location settings blob (enabled flag, alias name)."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

import aiofiles
import aiofiles.os

from ...core.exceptions import ConfigParseFailedError
from ...models import LocationSettings

# Alias name keys in priority order; the last two come from older settings files
ALIAS_NAME_KEYS = ("aliasName", "symlinkPath", "customMountPoint")
CREATE_ALIAS_KEYS = ("createAlias", "createSymlink")


def parse_location_settings(raw: str, source: str = "<blob>") -> Dict[str, LocationSettings]:
    """
    Decode the JSON blob into LocationSettings keyed by uri.

    Raises ConfigParseFailedError when the blob is not a JSON object. Entries
    that are not objects are skipped with a warning.
    """
    if not raw.strip():
        return {}

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigParseFailedError(source, str(e)) from e

    if not isinstance(data, dict):
        raise ConfigParseFailedError(source, f"expected an object, got {type(data).__name__}")

    parsed: Dict[str, LocationSettings] = {}
    for uri, entry in data.items():
        if not isinstance(entry, dict):
            logging.warning(f"Ignoring malformed settings for {uri} in {source}")
            continue
        parsed[uri] = _entry_to_settings(entry)

    return parsed


def _entry_to_settings(entry: Mapping[str, Any]) -> LocationSettings:
    alias_name = None
    for key in ALIAS_NAME_KEYS:
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            alias_name = value.strip()
            break

    create_alias = True
    for key in CREATE_ALIAS_KEYS:
        if key in entry:
            create_alias = entry[key] is not False
            break

    return LocationSettings(
        enabled=entry.get("enabled") is not False,
        alias_name=alias_name,
        create_alias=create_alias,
    )


def serialize_location_settings(settings: Mapping[str, LocationSettings]) -> str:
    data = {
        uri: {
            "enabled": value.enabled,
            "aliasName": value.alias_name or "",
            "createAlias": value.create_alias,
        }
        for uri, value in settings.items()
    }
    return json.dumps(data, indent=2, sort_keys=True)


class LocationSettingsRepository:
    """Reads and writes the settings blob file. Read errors fall back to defaults."""

    def __init__(self, settings_path: Path):
        self._path = Path(settings_path)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> Dict[str, LocationSettings]:
        if not await aiofiles.os.path.exists(self._path):
            return {}

        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8") as f:
                raw = await f.read()
            return parse_location_settings(raw, source=str(self._path))
        except ConfigParseFailedError as e:
            logging.warning(f"{e} - falling back to default location settings")
            return {}
        except OSError as e:
            logging.warning(f"Could not read location settings {self._path}: {e}")
            return {}

    async def save(self, settings: Mapping[str, LocationSettings]) -> None:
        await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(serialize_location_settings(settings))
        await aiofiles.os.replace(tmp_path, self._path)
        logging.info(f"Saved settings for {len(settings)} location(s) to {self._path}")

    async def update(self, uri: str, location_settings: LocationSettings) -> None:
        """Replace the settings of one uri, keeping every other entry."""
        current = await self.load()
        current[uri] = location_settings
        await self.save(current)
