# automount/domains/presentation/registration.py

import logging

from automount.core.events.event_bus import DomainEventBus
from automount.core.events.mount_events import (
    LOCATION_EVENTS,
    NotificationRequestedEvent,
    StatusChangedEvent,
)
from automount.dependencies import get_presentation_event_handlers


async def register_presentation_domain(event_bus: DomainEventBus) -> None:
    """Subscribe the WebSocket presentation handlers to orchestrator events."""
    logging.info("Subscribing presentation event handlers...")

    handlers = get_presentation_event_handlers()

    await event_bus.subscribe(StatusChangedEvent, handlers.handle_status_changed)
    await event_bus.subscribe_many(LOCATION_EVENTS, handlers.handle_location_event)
    await event_bus.subscribe(NotificationRequestedEvent, handlers.handle_notification)

    logging.info("Presentation domain registration complete")
