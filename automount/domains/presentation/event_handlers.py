import dataclasses
import logging
from typing import Any, Dict

from automount.core.events.domain_event import DomainEvent
from automount.core.events.mount_events import (
    NotificationRequestedEvent,
    StatusChangedEvent,
)
from automount.domains.presentation.websocket_manager import WebSocketManager
from automount.services.orchestrator.status_aggregator import format_status_line


def _serialize_event_fields(event: DomainEvent) -> Dict[str, Any]:
    data = {}
    for field in dataclasses.fields(event):
        if field.name in ("event_id", "timestamp"):
            continue
        data[field.name] = getattr(event, field.name)
    return data


def _to_snake_case(name: str) -> str:
    name = name[: -len("Event")] if name.endswith("Event") else name
    return "".join(
        f"_{char.lower()}" if char.isupper() and index else char.lower()
        for index, char in enumerate(name)
    )


class PresentationEventHandlers:
    """Forwards orchestrator events to WebSocket clients as JSON messages."""

    def __init__(self, websocket_manager: WebSocketManager):
        self.websocket_manager = websocket_manager

    async def handle_status_changed(self, event: StatusChangedEvent) -> None:
        snapshot = event.snapshot
        message_data = {
            "type": "status",
            "data": {
                **snapshot.model_dump(mode="json"),
                "summary": format_status_line(snapshot),
            },
        }
        self.websocket_manager.broadcast_message(message_data)

    async def handle_location_event(self, event: DomainEvent) -> None:
        logging.debug(f"Forwarding {event.event_name} to WebSocket clients")
        message_data = {
            "type": "location_event",
            "data": {
                "event": _to_snake_case(event.event_name),
                **_serialize_event_fields(event),
                "timestamp": event.timestamp.isoformat(),
            },
        }
        self.websocket_manager.broadcast_message(message_data)

    async def handle_notification(self, event: NotificationRequestedEvent) -> None:
        message_data = {
            "type": "notification",
            "data": {
                "title": event.title,
                "message": event.message,
                "is_error": event.is_error,
                "timestamp": event.timestamp.isoformat(),
            },
        }
        self.websocket_manager.broadcast_message(message_data)
