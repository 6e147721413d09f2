"""
Central domain event bus (Mediator Pattern).
"""
import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, Iterable, List, Type

from automount.core.events.domain_event import DomainEvent

# An event handler is an async function that takes a DomainEvent and returns None
EventHandler = Callable[[DomainEvent], Awaitable[None]]


class DomainEventBus:
    """
    Asynchronous event bus connecting the orchestrator to its consumers.

    A failing handler never prevents the other handlers from running and never
    propagates back into the publisher; the orchestrator's reconciliation loop
    must survive any consumer bug.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribes a handler to a specific event type.

        Args:
            event_type: The class of the domain event to subscribe to.
            handler: The asynchronous function to call when the event is published.
        """
        async with self._lock:
            self._handlers[event_type].append(handler)
            logging.debug(
                f"Handler {getattr(handler, '__name__', handler)} subscribed to {event_type.__name__}"
            )

    async def subscribe_many(
        self, event_types: Iterable[Type[DomainEvent]], handler: EventHandler
    ) -> None:
        """Subscribes one handler to several event types."""
        for event_type in event_types:
            await self.subscribe(event_type, handler)

    async def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> bool:
        async with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
            return False

    def handler_count(self, event_type: Type[DomainEvent]) -> int:
        return len(self._handlers.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        """
        Publishes a domain event to every handler subscribed to its exact type.

        Handlers run concurrently; exceptions are logged per handler.
        """
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logging.debug(f"No handlers for event {event_type.__name__}")
            return

        logging.debug(f"Publishing {event_type.__name__} to {len(handlers)} handler(s)")

        tasks = [self._safe_execute(handler, event) for handler in handlers]
        await asyncio.gather(*tasks)

    async def _safe_execute(self, handler: EventHandler, event: DomainEvent) -> None:
        """
        Executes a single event handler safely, catching and logging any exceptions.
        """
        try:
            await handler(event)
        except Exception as e:
            logging.error(
                f"Unhandled exception in handler '{getattr(handler, '__name__', handler)}' for event "
                f"'{type(event).__name__}': {e}",
                exc_info=True,
            )
