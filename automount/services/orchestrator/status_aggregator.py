from typing import Iterable, Mapping, Tuple

from ...models import Location, MountHealth, StatusSnapshot


def count_status(
    locations: Iterable[Location], observed_mounted: Mapping[str, bool]
) -> Tuple[int, int]:
    """
    Return (mounted_count, enabled_count) over the enabled locations.

    Disabled locations are ignored even if mounted; an enabled location
    missing from observed_mounted counts as unmounted.
    """
    enabled = [location for location in locations if location.enabled]
    mounted = sum(1 for location in enabled if observed_mounted.get(location.uri, False))
    return mounted, len(enabled)


def compute_health(mounted_count: int, enabled_count: int) -> MountHealth:
    if enabled_count == 0:
        return MountHealth.NOTHING_CONFIGURED
    if mounted_count == 0:
        return MountHealth.NONE_MOUNTED
    if mounted_count >= enabled_count:
        return MountHealth.ALL_GOOD
    return MountHealth.PARTIAL


def build_snapshot(
    mounted_count: int, enabled_count: int, check_interval_minutes: int
) -> StatusSnapshot:
    return StatusSnapshot(
        mounted_count=mounted_count,
        enabled_count=enabled_count,
        health=compute_health(mounted_count, enabled_count),
        check_interval_minutes=check_interval_minutes,
    )


def format_status_line(snapshot: StatusSnapshot) -> str:
    """One-line summary, e.g. ``2/3 mounted • Check every 5min``."""
    return (
        f"{snapshot.mounted_count}/{snapshot.enabled_count} mounted "
        f"• Check every {snapshot.check_interval_minutes}min"
    )
