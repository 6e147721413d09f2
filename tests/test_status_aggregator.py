"""
Tests for mount status counting and health derivation.
"""

import pytest

from automount.models import Location, MountHealth
from automount.services.orchestrator import (
    build_snapshot,
    compute_health,
    count_status,
    format_status_line,
)


def location(uri, enabled=True):
    return Location(uri=uri, display_name=uri, enabled=enabled)


class TestStatusAggregation:
    @pytest.mark.parametrize(
        "mounted, enabled, expected",
        [
            (0, 0, MountHealth.NOTHING_CONFIGURED),
            (0, 3, MountHealth.NONE_MOUNTED),
            (2, 3, MountHealth.PARTIAL),
            (3, 3, MountHealth.ALL_GOOD),
        ],
    )
    def test_compute_health(self, mounted, enabled, expected):
        assert compute_health(mounted, enabled) == expected

    def test_disabled_locations_are_ignored(self):
        locations = [location("smb://a"), location("smb://b", enabled=False), location("smb://c")]
        observed = {"smb://a": True, "smb://b": True}

        assert count_status(locations, observed) == (1, 2)

    def test_snapshot_and_status_line(self):
        snapshot = build_snapshot(2, 3, check_interval_minutes=5)

        assert snapshot.health == MountHealth.PARTIAL
        assert format_status_line(snapshot) == "2/3 mounted • Check every 5min"
