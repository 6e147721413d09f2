"""
Mount Orchestrator Module

Components:
- MountOrchestrator: reconciliation passes, mount/unmount, retry policy
- NotificationHandler: maps orchestrator events to user notifications
- status_aggregator: (mounted, enabled) counts and health derivation
"""

from .mount_orchestrator import MountOrchestrator
from .notification_handler import NotificationHandler, build_notification
from .status_aggregator import build_snapshot, compute_health, count_status, format_status_line

__all__ = [
    "MountOrchestrator",
    "NotificationHandler",
    "build_notification",
    "build_snapshot",
    "compute_health",
    "count_status",
    "format_status_line",
]
