"""
Pytest configuration and shared fixtures.
"""

import asyncio
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest
import pytest_asyncio

from automount.config import Settings
from automount.core.events import mount_events
from automount.core.events.domain_event import DomainEvent
from automount.core.events.event_bus import DomainEventBus
from automount.core.exceptions import MountFailedError, NotMountedError
from automount.dependencies import reset_singletons
from automount.services.bookmarks import (
    BookmarkStore,
    GtkBookmarkSource,
    LocationSettingsRepository,
)
from automount.services.network_mount import BaseMountProvider
from automount.services.orchestrator import MountOrchestrator
from automount.services.retry_scheduler import RetryScheduler
from automount.services.symlink_manager import SymlinkManager

ALWAYS = -1


@pytest.fixture(autouse=True)
def clean_singletons():
    """Reset singletons before every test."""
    reset_singletons()
    yield
    reset_singletons()


class FakeMountProvider(BaseMountProvider):
    """
    In-memory provider. Mounted URIs get a real directory under root_dir so
    aliases can point somewhere.

    failures[uri] is the number of upcoming mount calls that fail (ALWAYS for
    every call). Setting `gate` holds mount() until the event is set.
    """

    def __init__(self, root_dir: Path):
        self.root_dir = root_dir
        self.mounted: Dict[str, str] = {}
        self.failures: Dict[str, int] = {}
        self.unmount_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.mount_calls: List[str] = []
        self.unmount_calls: List[str] = []
        self._next_share = 0

    async def is_mounted(self, uri: str) -> bool:
        return uri in self.mounted

    async def mount_root_path(self, uri: str) -> Optional[str]:
        return self.mounted.get(uri)

    async def mount(self, uri: str) -> None:
        self.mount_calls.append(uri)
        if self.gate is not None:
            await self.gate.wait()

        remaining = self.failures.get(uri, 0)
        if remaining:
            if remaining > 0:
                self.failures[uri] = remaining - 1
            raise MountFailedError(uri, "Connection refused")

        self.mount_externally(uri)

    async def unmount(self, uri: str) -> None:
        self.unmount_calls.append(uri)
        if self.unmount_error is not None:
            raise self.unmount_error
        if uri not in self.mounted:
            raise NotMountedError(uri)
        del self.mounted[uri]

    def get_platform_name(self) -> str:
        return "Fake"

    def mount_externally(self, uri: str) -> str:
        self._next_share += 1
        root = self.root_dir / f"share{self._next_share}"
        root.mkdir(parents=True, exist_ok=True)
        self.mounted[uri] = str(root)
        return str(root)


@pytest.fixture
def settings(tmp_path):
    settings = Mock(spec=Settings)
    settings.max_retries = 3
    settings.retry_delay_seconds = 0.01
    settings.check_interval_minutes = 5
    settings.startup_delay_seconds = 0
    settings.startup_settle_seconds = 0.2
    settings.alias_base_path = tmp_path / "NetworkMounts"
    settings.notifications_enabled = True
    settings.notify_success = True
    settings.notify_error = True
    return settings


def write_bookmarks(path: Path, lines: List[str]) -> None:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def write_location_settings(path: Path, data: dict) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


async def wait_until(predicate, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not reached before timeout")
        await asyncio.sleep(0.01)


@dataclass
class OrchestratorEnv:
    orchestrator: MountOrchestrator
    provider: FakeMountProvider
    store: BookmarkStore
    symlinks: SymlinkManager
    retry_scheduler: RetryScheduler
    event_bus: DomainEventBus
    settings: Mock
    bookmarks_path: Path
    location_settings_path: Path
    alias_dir: Path
    events: List[DomainEvent] = field(default_factory=list)

    def events_of(self, event_type) -> List[DomainEvent]:
        return [event for event in self.events if isinstance(event, event_type)]

    def bookmarks(self, *lines: str) -> None:
        write_bookmarks(self.bookmarks_path, list(lines))

    def location_settings(self, data: dict) -> None:
        write_location_settings(self.location_settings_path, data)


RECORDED_EVENTS = (
    *mount_events.LOCATION_EVENTS,
    mount_events.StatusChangedEvent,
    mount_events.MountCheckSummaryEvent,
    mount_events.BulkActionEvent,
    mount_events.NotificationRequestedEvent,
)


@pytest_asyncio.fixture
async def env(tmp_path, settings):
    provider = FakeMountProvider(tmp_path / "gvfs")
    bookmarks_path = tmp_path / "bookmarks"
    location_settings_path = tmp_path / "bookmark-settings.json"
    store = BookmarkStore(
        bookmark_source=GtkBookmarkSource(bookmarks_path),
        settings_repository=LocationSettingsRepository(location_settings_path),
    )
    symlinks = SymlinkManager(settings.alias_base_path)
    retry_scheduler = RetryScheduler()
    event_bus = DomainEventBus()

    orchestrator = MountOrchestrator(
        settings=settings,
        bookmark_store=store,
        mount_provider=provider,
        symlink_manager=symlinks,
        retry_scheduler=retry_scheduler,
        event_bus=event_bus,
    )

    environment = OrchestratorEnv(
        orchestrator=orchestrator,
        provider=provider,
        store=store,
        symlinks=symlinks,
        retry_scheduler=retry_scheduler,
        event_bus=event_bus,
        settings=settings,
        bookmarks_path=bookmarks_path,
        location_settings_path=location_settings_path,
        alias_dir=settings.alias_base_path,
    )

    async def record(event):
        environment.events.append(event)

    await event_bus.subscribe_many(RECORDED_EVENTS, record)

    yield environment

    await retry_scheduler.cancel_all()
