"""
Events emitted by the mount orchestrator.

Consumers (notification display, WebSocket clients) subscribe per event type
on the DomainEventBus. Every per-location event carries the uri as its key.
"""

from dataclasses import dataclass
from typing import Optional

from automount.core.events.domain_event import DomainEvent
from automount.models import StatusSnapshot


@dataclass(frozen=True)
class MountSucceededEvent(DomainEvent):
    """A mount request completed successfully."""
    uri: str
    display_name: str
    root_path: Optional[str] = None


@dataclass(frozen=True)
class MountFailedRetryingEvent(DomainEvent):
    """A mount failed and a retry has been scheduled."""
    uri: str
    display_name: str
    attempt: int
    max_retries: int
    error_message: str


@dataclass(frozen=True)
class MountFailedTerminalEvent(DomainEvent):
    """A mount failed and the retry budget is exhausted."""
    uri: str
    display_name: str
    error_message: str


@dataclass(frozen=True)
class AlreadyMountedEvent(DomainEvent):
    """A manual mount request found the location already mounted."""
    uri: str
    display_name: str


@dataclass(frozen=True)
class UnmountedEvent(DomainEvent):
    uri: str
    display_name: str


@dataclass(frozen=True)
class NotMountedEvent(DomainEvent):
    """Unmount was requested for a location that had no active mount."""
    uri: str
    display_name: str


@dataclass(frozen=True)
class UnmountFailedEvent(DomainEvent):
    uri: str
    display_name: str
    error_message: str


@dataclass(frozen=True)
class AliasFailedEvent(DomainEvent):
    """An alias could not be created or removed. The mount itself is unaffected."""
    uri: str
    display_name: str
    alias_path: Optional[str]
    operation: str  # "create" or "remove"
    error_message: str


@dataclass(frozen=True)
class StatusChangedEvent(DomainEvent):
    snapshot: StatusSnapshot


@dataclass(frozen=True)
class MountCheckSummaryEvent(DomainEvent):
    """One-shot summary published after a manual check."""
    total: int
    mounted: int


@dataclass(frozen=True)
class BulkActionEvent(DomainEvent):
    """Mount-all / unmount-all was requested for `count` locations."""
    action: str
    count: int


@dataclass(frozen=True)
class NotificationRequestedEvent(DomainEvent):
    """A user-facing notification that passed the notification preferences."""
    title: str
    message: str
    is_error: bool = False


LOCATION_EVENTS = (
    MountSucceededEvent,
    MountFailedRetryingEvent,
    MountFailedTerminalEvent,
    AlreadyMountedEvent,
    UnmountedEvent,
    NotMountedEvent,
    UnmountFailedEvent,
    AliasFailedEvent,
)
