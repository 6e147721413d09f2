import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import aiofiles.os

from ..core.exceptions import (
    AliasCollisionError,
    AliasCreateFailedError,
    AliasError,
    AliasRemoveFailedError,
)
from ..models import AliasResult, Location
from ..utils import is_valid_alias_override, sanitize_alias_name


def _same_target(link_target: str, expected: str) -> bool:
    return os.path.normpath(link_target) == os.path.normpath(expected)


class SymlinkManager:
    """
    Keeps a human-friendly symlink (alias) per mounted location.

    Alias paths are deterministic: ``base_directory / alias name``. The
    uri -> path records are only a cache for finding stale aliases; the
    authoritative path is always recomputed from the location's settings.

    When two locations resolve to the same alias path, a location that
    already holds the alias keeps it; otherwise the first one in bookmark
    order owns it. The others are blocked until they get a distinct alias
    name; their ensure() calls fail without touching the filesystem, and
    remove() never deletes a path held by another location.
    """

    def __init__(self, base_directory: Path):
        self._base = Path(base_directory)
        self._records: Dict[str, Path] = {}
        self._owners: Dict[Path, str] = {}
        self._blocked: Dict[str, str] = {}

    @property
    def base_directory(self) -> Path:
        return self._base

    def set_base_directory(self, base_directory: Path) -> None:
        """Point new aliases at another directory. Recorded aliases stay removable."""
        new_base = Path(base_directory)
        if new_base != self._base:
            logging.info(f"Alias base directory changed: {self._base} -> {new_base}")
            self._base = new_base
            self._owners.clear()
            self._blocked.clear()

    def resolve_alias_name(self, location: Location) -> str:
        if location.alias_name:
            if not is_valid_alias_override(location.alias_name):
                raise AliasCreateFailedError(
                    location.alias_name,
                    "Alias name must be a single file name without path separators",
                )
            return location.alias_name
        return sanitize_alias_name(location.display_name)

    def alias_path_for(self, location: Location) -> Path:
        return self._base / self.resolve_alias_name(location)

    def get_alias_record(self, uri: str) -> Optional[Path]:
        return self._records.get(uri)

    def get_collision_owner(self, uri: str) -> Optional[str]:
        return self._blocked.get(uri)

    def sync_locations(self, locations: Iterable[Location]) -> Dict[str, str]:
        """
        Recompute alias ownership for the current location set.

        Returns the blocked locations as ``{blocked uri: owner uri}``.
        """
        wanted: List[Tuple[str, Path]] = []
        for location in locations:
            if not location.create_alias:
                continue
            try:
                wanted.append((location.uri, self.alias_path_for(location)))
            except AliasCreateFailedError:
                continue

        owners: Dict[Path, str] = {}
        for uri, alias_path in wanted:
            if self._records.get(uri) == alias_path:
                owners.setdefault(alias_path, uri)

        blocked: Dict[str, str] = {}
        for uri, alias_path in wanted:
            owner = owners.setdefault(alias_path, uri)
            if owner != uri:
                blocked[uri] = owner
                if self._blocked.get(uri) != owner:
                    logging.warning(
                        f"Alias collision: {uri} resolves to {alias_path}, "
                        f"already used by {owner}. Set a distinct alias name."
                    )

        # A record for a path owned by someone else is no longer ours to remove
        for uri, recorded in list(self._records.items()):
            owner = owners.get(recorded)
            if owner is not None and owner != uri:
                logging.debug(f"Dropping alias record of {uri}: {recorded} now belongs to {owner}")
                del self._records[uri]

        self._owners = owners
        self._blocked = blocked
        return dict(blocked)

    async def ensure(self, location: Location, target_root_path: str) -> AliasResult:
        """Create or refresh the alias. Never raises; failures are reported in the result."""
        try:
            alias_path = self.alias_path_for(location)
            self._check_ownership(location.uri, alias_path)
        except AliasError as e:
            logging.warning(f"Alias not created for {location.uri}: {e.message}")
            return AliasResult(success=False, alias_path=e.alias_path, error_message=e.message)

        try:
            changed = await self._ensure_link(location.uri, alias_path, target_root_path)
        except AliasError as e:
            logging.warning(f"Alias not created for {location.uri}: {e.message}")
            return AliasResult(success=False, alias_path=str(alias_path), error_message=e.message)
        except OSError as e:
            logging.error(f"Failed to create alias {alias_path} -> {target_root_path}: {e}")
            return AliasResult(success=False, alias_path=str(alias_path), error_message=str(e))

        self._records[location.uri] = alias_path
        return AliasResult(success=True, alias_path=str(alias_path), changed=changed)

    async def remove(self, location: Location) -> AliasResult:
        """
        Remove this location's alias. A missing alias is a no-op; an entry
        that is not a symlink is never deleted.
        """
        candidates: List[Path] = []
        recorded = self._records.get(location.uri)
        if recorded is not None and self._held_by(recorded, location.uri) is None:
            candidates.append(recorded)

        try:
            deterministic: Optional[Path] = self.alias_path_for(location)
        except AliasCreateFailedError:
            deterministic = None

        # Anything other than a symlink at the unrecorded path is not ours
        if (
            deterministic is not None
            and deterministic != recorded
            and location.uri not in self._blocked
            and self._held_by(deterministic, location.uri) is None
            and await aiofiles.os.path.islink(deterministic)
        ):
            candidates.append(deterministic)

        changed = False
        for alias_path in candidates:
            try:
                changed = await self._remove_link(alias_path) or changed
            except AliasRemoveFailedError as e:
                logging.warning(f"Alias not removed for {location.uri}: {e.message}")
                return AliasResult(success=False, alias_path=e.alias_path, error_message=e.message)
            except OSError as e:
                logging.error(f"Failed to remove alias {alias_path}: {e}")
                return AliasResult(success=False, alias_path=str(alias_path), error_message=str(e))

        self._records.pop(location.uri, None)
        alias_path = candidates[0] if candidates else deterministic
        return AliasResult(
            success=True,
            alias_path=str(alias_path) if alias_path is not None else None,
            changed=changed,
        )

    async def remove_orphans(self, known_uris: Iterable[str]) -> int:
        """Remove aliases recorded for uris that are no longer bookmarked."""
        known = set(known_uris)
        removed = 0
        for uri in [uri for uri in self._records if uri not in known]:
            alias_path = self._records.pop(uri)
            try:
                if await self._remove_link(alias_path):
                    removed += 1
                    logging.info(f"Removed alias of forgotten bookmark {uri}: {alias_path}")
            except (AliasRemoveFailedError, OSError) as e:
                logging.warning(f"Could not remove alias of forgotten bookmark {uri}: {e}")
        return removed

    async def remove_all(self, locations: Iterable[Location]) -> int:
        """Remove every alias we manage. Called once on shutdown."""
        locations = list(locations)
        removed = 0
        for location in locations:
            result = await self.remove(location)
            if result.changed:
                removed += 1
        removed += await self.remove_orphans(location.uri for location in locations)
        logging.info(f"Removed {removed} alias(es) on shutdown")
        return removed

    def _held_by(self, alias_path: Path, uri: str) -> Optional[str]:
        """The other uri that owns or has recorded alias_path, if any."""
        owner = self._owners.get(alias_path)
        if owner is not None and owner != uri:
            return owner
        for other, recorded in self._records.items():
            if other != uri and recorded == alias_path:
                return other
        return None

    def _check_ownership(self, uri: str, alias_path: Path) -> None:
        owner = self._blocked.get(uri) or self._held_by(alias_path, uri)
        if owner is not None and owner != uri:
            raise AliasCollisionError(str(alias_path), owner)
        self._owners.setdefault(alias_path, uri)

    async def _ensure_link(self, uri: str, alias_path: Path, target_root_path: str) -> bool:
        previous = self._records.get(uri)
        if (
            previous is not None
            and previous != alias_path
            and self._held_by(previous, uri) is None
        ):
            try:
                await self._remove_link(previous)
                logging.info(f"Removed previous alias {previous} for {uri}")
            except AliasRemoveFailedError as e:
                logging.warning(f"Previous alias for {uri} left in place: {e.message}")

        await aiofiles.os.makedirs(alias_path.parent, exist_ok=True)

        if await aiofiles.os.path.islink(alias_path):
            current_target = await aiofiles.os.readlink(str(alias_path))
            if _same_target(current_target, target_root_path):
                return False
            logging.info(f"Replacing stale alias {alias_path} (was -> {current_target})")
            await aiofiles.os.unlink(alias_path)

        elif await aiofiles.os.path.isdir(alias_path):
            # Empty directories are leftovers of older custom mount points
            if await aiofiles.os.listdir(alias_path):
                raise AliasCreateFailedError(
                    str(alias_path), "A non-empty directory occupies the alias path"
                )
            logging.info(f"Replacing empty directory {alias_path} with alias")
            await aiofiles.os.rmdir(alias_path)

        elif await aiofiles.os.path.exists(alias_path):
            raise AliasCreateFailedError(str(alias_path), "A regular file occupies the alias path")

        await aiofiles.os.symlink(target_root_path, alias_path)
        logging.info(f"Created alias {alias_path} -> {target_root_path}")
        return True

    async def _remove_link(self, alias_path: Path) -> bool:
        if await aiofiles.os.path.islink(alias_path):
            await aiofiles.os.unlink(alias_path)
            logging.info(f"Removed alias {alias_path}")
            return True

        if await aiofiles.os.path.exists(alias_path):
            raise AliasRemoveFailedError(
                str(alias_path), "Path exists but is not a symbolic link; left untouched"
            )

        return False
