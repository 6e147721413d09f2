import logging
from typing import Optional

from automount.core.events.domain_event import DomainEvent
from automount.core.events.event_bus import DomainEventBus
from automount.core.events.mount_events import (
    AliasFailedEvent,
    AlreadyMountedEvent,
    BulkActionEvent,
    MountCheckSummaryEvent,
    MountFailedRetryingEvent,
    MountFailedTerminalEvent,
    MountSucceededEvent,
    NotificationRequestedEvent,
    NotMountedEvent,
    UnmountedEvent,
    UnmountFailedEvent,
)

from ...config import Settings

NOTIFICATION_SOURCES = (
    MountSucceededEvent,
    MountFailedRetryingEvent,
    MountFailedTerminalEvent,
    AlreadyMountedEvent,
    UnmountedEvent,
    NotMountedEvent,
    UnmountFailedEvent,
    AliasFailedEvent,
    MountCheckSummaryEvent,
    BulkActionEvent,
)


def build_notification(event: DomainEvent) -> Optional[NotificationRequestedEvent]:
    """Map an orchestrator event to its user-facing notification, if it has one."""
    if isinstance(event, MountSucceededEvent):
        return NotificationRequestedEvent(
            title="Mounted Successfully", message=f"{event.display_name} is now available"
        )
    if isinstance(event, MountFailedRetryingEvent):
        return NotificationRequestedEvent(
            title="Mount Failed - Retrying",
            message=(
                f"{event.display_name}: {event.error_message} "
                f"(attempt {event.attempt}/{event.max_retries})"
            ),
            is_error=True,
        )
    if isinstance(event, MountFailedTerminalEvent):
        return NotificationRequestedEvent(
            title="Mount Failed",
            message=f"{event.display_name}: {event.error_message}",
            is_error=True,
        )
    if isinstance(event, AlreadyMountedEvent):
        return NotificationRequestedEvent(
            title="Already Mounted", message=f"{event.display_name} is already mounted"
        )
    if isinstance(event, UnmountedEvent):
        return NotificationRequestedEvent(
            title="Unmounted", message=f"{event.display_name} has been unmounted"
        )
    if isinstance(event, NotMountedEvent):
        return NotificationRequestedEvent(
            title="Not Mounted", message=f"{event.display_name} was not mounted"
        )
    if isinstance(event, UnmountFailedEvent):
        return NotificationRequestedEvent(
            title="Unmount Failed",
            message=f"{event.display_name}: {event.error_message}",
            is_error=True,
        )
    if isinstance(event, AliasFailedEvent):
        return NotificationRequestedEvent(
            title="Alias Failed",
            message=f"{event.display_name}: {event.error_message}",
            is_error=True,
        )
    if isinstance(event, MountCheckSummaryEvent):
        return NotificationRequestedEvent(
            title="Mount Check",
            message=f"{event.mounted}/{event.total} locations mounted",
        )
    if isinstance(event, BulkActionEvent):
        if event.action == "mount_all":
            return NotificationRequestedEvent(
                title="Mounting All", message=f"Attempting to mount {event.count} location(s)"
            )
        if event.action == "unmount_all":
            return NotificationRequestedEvent(
                title="Unmounting All", message=f"Unmounting {event.count} location(s)"
            )
    return None


class NotificationHandler:
    """
    Turns orchestrator events into NotificationRequestedEvents, filtered by
    the notification preferences in Settings.
    """

    def __init__(self, settings: Settings, event_bus: DomainEventBus):
        self._settings = settings
        self._event_bus = event_bus

    def apply_settings(self, settings: Settings) -> None:
        self._settings = settings

    async def register(self) -> None:
        await self._event_bus.subscribe_many(NOTIFICATION_SOURCES, self.handle_event)

    def should_notify(self, notification: NotificationRequestedEvent) -> bool:
        if not self._settings.notifications_enabled:
            return False
        if notification.is_error:
            return self._settings.notify_error
        return self._settings.notify_success

    async def handle_event(self, event: DomainEvent) -> None:
        notification = build_notification(event)
        if notification is None:
            return

        if not self.should_notify(notification):
            logging.debug(f"Notification suppressed by preferences: {notification.title}")
            return

        logging.info(f"Notification: {notification.title} - {notification.message}")
        await self._event_bus.publish(notification)
