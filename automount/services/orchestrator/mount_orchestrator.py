import asyncio
import logging
from datetime import datetime
from functools import partial
from typing import Dict, List, Optional

from automount.core.events.event_bus import DomainEventBus
from automount.core.events.mount_events import (
    AliasFailedEvent,
    AlreadyMountedEvent,
    BulkActionEvent,
    MountCheckSummaryEvent,
    MountFailedRetryingEvent,
    MountFailedTerminalEvent,
    MountSucceededEvent,
    NotMountedEvent,
    StatusChangedEvent,
    UnmountedEvent,
    UnmountFailedEvent,
)
from automount.core.exceptions import LocationNotFoundError, MountError, NotMountedError

from .status_aggregator import build_snapshot, count_status, format_status_line
from ..bookmarks import BookmarkStore
from ..network_mount import BaseMountProvider
from ..retry_scheduler import RetryScheduler
from ..symlink_manager import SymlinkManager
from ...config import Settings
from ...models import (
    AliasResult,
    Location,
    LocationSettings,
    LocationView,
    MountTrigger,
    ObservedMountState,
    StatusSnapshot,
)


class MountOrchestrator:
    """
    Drives every Location toward its desired mount state.

    Reconciliation passes, manual actions and retry timers all funnel into
    attempt_mount()/unmount(). Those two guard on a per-uri in-flight marker
    that is set before the first await, so at most one provider operation
    runs per uri at any time on the event loop.

    Mount state is never cached: every decision asks the provider first.
    """

    def __init__(
        self,
        settings: Settings,
        bookmark_store: BookmarkStore,
        mount_provider: BaseMountProvider,
        symlink_manager: SymlinkManager,
        retry_scheduler: RetryScheduler,
        event_bus: DomainEventBus,
    ):
        self._settings = settings
        self._store = bookmark_store
        self._provider = mount_provider
        self._symlinks = symlink_manager
        self._retry_scheduler = retry_scheduler
        self._event_bus = event_bus

        self._in_flight: Dict[str, str] = {}
        self._reported_alias_failures: Dict[str, str] = {}
        self._startup_in_progress = False
        self._startup_tasks: List[asyncio.Task] = []
        self._last_snapshot: Optional[StatusSnapshot] = None

        logging.info(
            f"MountOrchestrator initialized with {self._provider.get_platform_name()} provider"
        )

    @property
    def startup_in_progress(self) -> bool:
        return self._startup_in_progress

    def is_in_flight(self, uri: str) -> bool:
        return uri in self._in_flight

    def apply_settings(self, settings: Settings) -> None:
        """Swap in new agent settings. Picked up by the next pass or retry."""
        self._settings = settings
        self._symlinks.set_base_directory(settings.alias_base_path)

    # Reconciliation

    async def reconcile(self, trigger: MountTrigger, is_startup: bool = False) -> StatusSnapshot:
        logging.info(f"Reconciliation pass started (trigger: {trigger.value})")

        locations = await self._store.reload()
        self._cancel_stale_retries(locations)
        self._symlinks.sync_locations(locations)
        await self._symlinks.remove_orphans(location.uri for location in locations)

        observed: Dict[str, bool] = {}
        to_mount: List[Location] = []

        for location in locations:
            state = await self._observe(location.uri)
            observed[location.uri] = state.mounted

            if state.mounted:
                await self._sync_alias(location, state.root_path)
                continue

            if location.uri not in self._in_flight:
                await self._remove_alias(location)
            if location.enabled:
                to_mount.append(location)

        mounted_before, total = count_status(locations, observed)

        if to_mount:
            logging.info(f"{len(to_mount)} enabled location(s) not mounted, attempting mount")
            await asyncio.gather(
                *(
                    self.attempt_mount(
                        location, is_retry=False, is_startup=is_startup, trigger=trigger
                    )
                    for location in to_mount
                )
            )

        snapshot = await self.publish_status()

        if trigger == MountTrigger.MANUAL:
            await self._event_bus.publish(
                MountCheckSummaryEvent(total=total, mounted=mounted_before)
            )

        logging.info(f"Reconciliation pass finished: {format_status_line(snapshot)}")
        return snapshot

    def _cancel_stale_retries(self, locations: List[Location]) -> None:
        by_uri = {location.uri: location for location in locations}
        for uri in self._retry_scheduler.pending_uris():
            location = by_uri.get(uri)
            if location is None or not location.enabled:
                self._retry_scheduler.cancel(uri)
                logging.info(f"Cancelled retry for {uri}: location removed or disabled")

    # Mount / unmount

    async def attempt_mount(
        self,
        location: Location,
        is_retry: bool = False,
        is_startup: bool = False,
        trigger: MountTrigger = MountTrigger.PERIODIC,
    ) -> bool:
        uri = location.uri
        if uri in self._in_flight:
            logging.debug(f"Skipping mount of {uri}: {self._in_flight[uri]} already in progress")
            return False

        self._in_flight[uri] = "mount"
        try:
            state = await self._observe(uri)
            if state.mounted:
                await self._sync_alias(self._store.get(uri) or location, state.root_path)
                if trigger == MountTrigger.MANUAL and not is_retry and not is_startup:
                    await self._event_bus.publish(
                        AlreadyMountedEvent(uri=uri, display_name=location.display_name)
                    )
                return True

            logging.info(
                f"Mounting {location.display_name} ({uri})"
                + (" [retry]" if is_retry else "")
            )

            try:
                await self._provider.mount(uri)
            except MountError as e:
                await self.handle_mount_failure(location, e.message)
                return False
            except Exception as e:
                logging.error(f"Unexpected error mounting {uri}: {e}", exc_info=True)
                await self.handle_mount_failure(location, str(e))
                return False

            await self._handle_mount_success(location, is_startup)
            return True
        finally:
            self._in_flight.pop(uri, None)

    async def _handle_mount_success(self, location: Location, is_startup: bool) -> None:
        uri = location.uri
        current = self._store.get(uri)
        target = current or location
        target.fail_count = 0
        target.last_attempt_at = datetime.now()

        self._retry_scheduler.cancel(uri)

        root_path: Optional[str] = None
        if current is None:
            logging.info(f"Mounted {uri}, but the bookmark was removed meanwhile")
        else:
            root_path = (await self._observe(uri)).root_path
            await self._sync_alias(current, root_path)

        logging.info(f"Mounted {location.display_name} ({uri})")

        # Disabled while the request was in flight: keep the mount, stay quiet
        still_wanted = current is not None and (current.enabled or not location.enabled)
        if not still_wanted:
            logging.info(f"Success notification suppressed for {uri}: disabled or removed")
        elif not is_startup:
            await self._event_bus.publish(
                MountSucceededEvent(
                    uri=uri, display_name=location.display_name, root_path=root_path
                )
            )

        await self.publish_status()

    async def handle_mount_failure(self, location: Location, error_message: str) -> None:
        uri = location.uri
        target = self._store.get(uri) or location
        target.fail_count += 1
        target.last_attempt_at = datetime.now()

        max_retries = self._settings.max_retries
        if target.fail_count <= max_retries:
            delay = self._settings.retry_delay_seconds
            logging.warning(
                f"Mount of {uri} failed (attempt {target.fail_count}/{max_retries}), "
                f"retrying in {delay}s: {error_message}"
            )
            self._retry_scheduler.schedule(uri, delay, partial(self._on_retry_due, uri))
            await self._event_bus.publish(
                MountFailedRetryingEvent(
                    uri=uri,
                    display_name=location.display_name,
                    attempt=target.fail_count,
                    max_retries=max_retries,
                    error_message=error_message,
                )
            )
        else:
            logging.error(
                f"Mount of {uri} failed after {target.fail_count} attempts, giving up: {error_message}"
            )
            await self._event_bus.publish(
                MountFailedTerminalEvent(
                    uri=uri, display_name=location.display_name, error_message=error_message
                )
            )

        await self.publish_status()

    async def _on_retry_due(self, uri: str) -> None:
        location = self._store.get(uri)
        if location is None:
            logging.debug(f"Retry for {uri} dropped: bookmark no longer exists")
            return
        if not location.enabled:
            logging.debug(f"Retry for {uri} dropped: location disabled")
            return

        # attempt_mount re-checks the mount state and the in-flight marker
        await self.attempt_mount(
            location,
            is_retry=True,
            is_startup=self._startup_in_progress,
            trigger=MountTrigger.RETRY,
        )

    async def unmount(self, location: Location) -> bool:
        uri = location.uri
        if uri in self._in_flight:
            logging.debug(f"Skipping unmount of {uri}: {self._in_flight[uri]} already in progress")
            return False

        self._in_flight[uri] = "unmount"
        try:
            self._retry_scheduler.cancel(uri)
            await self._remove_alias(location)

            try:
                await self._provider.unmount(uri)
            except NotMountedError:
                await self._remove_alias(location)
                logging.info(f"Unmount requested for {uri}, but it is not mounted")
                await self._event_bus.publish(
                    NotMountedEvent(uri=uri, display_name=location.display_name)
                )
                await self.publish_status()
                return True
            except MountError as e:
                logging.error(f"Unmount of {uri} failed: {e.message}")
                await self._event_bus.publish(
                    UnmountFailedEvent(
                        uri=uri, display_name=location.display_name, error_message=e.message
                    )
                )
                return False
            except Exception as e:
                logging.error(f"Unexpected error unmounting {uri}: {e}", exc_info=True)
                await self._event_bus.publish(
                    UnmountFailedEvent(
                        uri=uri, display_name=location.display_name, error_message=str(e)
                    )
                )
                return False

            await self._remove_alias(location)
            logging.info(f"Unmounted {location.display_name} ({uri})")
            await self._event_bus.publish(
                UnmountedEvent(uri=uri, display_name=location.display_name)
            )
            await self.publish_status()
            return True
        finally:
            self._in_flight.pop(uri, None)

    # Manual actions

    def _require(self, uri: str) -> Location:
        location = self._store.get(uri)
        if location is None:
            raise LocationNotFoundError(uri)
        return location

    async def mount_location(self, uri: str) -> bool:
        return await self.attempt_mount(self._require(uri), trigger=MountTrigger.MANUAL)

    async def unmount_location(self, uri: str) -> bool:
        return await self.unmount(self._require(uri))

    async def toggle_location(self, uri: str) -> bool:
        location = self._require(uri)
        if (await self._observe(uri)).mounted:
            return await self.unmount(location)
        return await self.attempt_mount(location, trigger=MountTrigger.MANUAL)

    async def mount_all_enabled(self) -> int:
        pending = [
            location
            for location in self._store.get_enabled()
            if not (await self._observe(location.uri)).mounted
        ]
        await self._event_bus.publish(BulkActionEvent(action="mount_all", count=len(pending)))
        if pending:
            await asyncio.gather(
                *(self.attempt_mount(location, trigger=MountTrigger.MANUAL) for location in pending)
            )
        return len(pending)

    async def unmount_all(self) -> int:
        mounted = [
            location
            for location in self._store.get_all()
            if (await self._observe(location.uri)).mounted
        ]
        await self._event_bus.publish(BulkActionEvent(action="unmount_all", count=len(mounted)))
        if mounted:
            await asyncio.gather(*(self.unmount(location) for location in mounted))
        return len(mounted)

    async def update_location_settings(
        self,
        uri: str,
        enabled: Optional[bool] = None,
        alias_name: Optional[str] = None,
        create_alias: Optional[bool] = None,
    ) -> StatusSnapshot:
        """
        Persist new settings for one location and apply them immediately.

        None leaves a field unchanged; an empty alias_name clears the
        override so the display name is used again.
        """
        location = self._require(uri)

        if alias_name is None:
            new_alias = location.alias_name
        else:
            new_alias = alias_name.strip() or None

        location_settings = LocationSettings(
            enabled=location.enabled if enabled is None else enabled,
            alias_name=new_alias,
            create_alias=location.create_alias if create_alias is None else create_alias,
        )
        await self._store.save_location_settings(uri, location_settings)
        logging.info(f"Settings updated for {uri}: {location_settings.model_dump()}")

        return await self.reconcile(MountTrigger.SETTINGS_CHANGED)

    # Lifecycle

    def start(self) -> None:
        """Schedule the startup pass and the end of the startup window."""
        self._startup_in_progress = True
        self._startup_tasks = [
            asyncio.create_task(self._startup_reconcile()),
            asyncio.create_task(self._finish_startup()),
        ]
        logging.info(
            f"Startup pass in {self._settings.startup_delay_seconds}s, "
            f"notifications resume after {self._settings.startup_settle_seconds}s"
        )

    async def run_startup_sequence(self) -> None:
        """Run the startup pass and settle window inline; used by tests and one-shot runs."""
        self.start()
        await asyncio.gather(*self._startup_tasks)

    async def _startup_reconcile(self) -> None:
        await asyncio.sleep(self._settings.startup_delay_seconds)
        try:
            await self.reconcile(MountTrigger.STARTUP, is_startup=True)
        except Exception as e:
            logging.error(f"Startup reconciliation failed: {e}", exc_info=True)

    async def _finish_startup(self) -> None:
        await asyncio.sleep(self._settings.startup_settle_seconds)
        self._startup_in_progress = False
        logging.info("Startup window closed")
        await self.publish_status()

    async def shutdown(self) -> None:
        for task in self._startup_tasks:
            task.cancel()
        if self._startup_tasks:
            await asyncio.gather(*self._startup_tasks, return_exceptions=True)
        self._startup_tasks = []

        await self._retry_scheduler.cancel_all()
        await self._symlinks.remove_all(self._store.get_all())
        logging.info("MountOrchestrator shut down")

    # Views

    async def publish_status(self) -> StatusSnapshot:
        locations = self._store.get_all()
        observed = {
            location.uri: (await self._observe(location.uri)).mounted
            for location in locations
            if location.enabled
        }
        mounted, enabled = count_status(locations, observed)
        snapshot = build_snapshot(mounted, enabled, self._settings.check_interval_minutes)
        self._last_snapshot = snapshot

        await self._event_bus.publish(StatusChangedEvent(snapshot=snapshot))
        return snapshot

    async def get_status(self) -> StatusSnapshot:
        if self._last_snapshot is None:
            return await self.publish_status()
        return self._last_snapshot

    async def get_locations(self) -> List[LocationView]:
        views: List[LocationView] = []
        for location in self._store.get_all():
            state = await self._observe(location.uri)
            record = self._symlinks.get_alias_record(location.uri)
            views.append(
                LocationView(
                    location=location,
                    mounted=state.mounted,
                    root_path=state.root_path,
                    alias_path=str(record) if record is not None else None,
                    in_flight=self._in_flight.get(location.uri),
                    retry_pending=self._retry_scheduler.has_pending(location.uri),
                )
            )
        return views

    # Helpers

    async def _observe(self, uri: str) -> ObservedMountState:
        try:
            if not await self._provider.is_mounted(uri):
                return ObservedMountState(mounted=False)
            root_path = await self._provider.mount_root_path(uri)
        except MountError as e:
            logging.warning(f"Could not query mount state of {uri}: {e.message}")
            return ObservedMountState(mounted=False)
        return ObservedMountState(mounted=True, root_path=root_path)

    async def _sync_alias(self, location: Location, root_path: Optional[str]) -> None:
        if not location.create_alias:
            await self._remove_alias(location)
            return

        if not root_path:
            await self._report_alias_result(
                location,
                "create",
                AliasResult(success=False, error_message="Mount has no local path"),
            )
            return

        result = await self._symlinks.ensure(location, root_path)
        await self._report_alias_result(location, "create", result)

    async def _remove_alias(self, location: Location) -> None:
        result = await self._symlinks.remove(location)
        await self._report_alias_result(location, "remove", result)

    async def _report_alias_result(
        self, location: Location, operation: str, result: AliasResult
    ) -> None:
        if result.success:
            self._reported_alias_failures.pop(location.uri, None)
            return

        message = result.error_message or "Unknown alias error"
        if self._reported_alias_failures.get(location.uri) == message:
            return
        self._reported_alias_failures[location.uri] = message

        await self._event_bus.publish(
            AliasFailedEvent(
                uri=location.uri,
                display_name=location.display_name,
                alias_path=result.alias_path,
                operation=operation,
                error_message=message,
            )
        )
