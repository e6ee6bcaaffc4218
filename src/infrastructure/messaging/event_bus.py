"""In-memory async event bus for study activity notifications.

Events are dispatched to subscribers in-process and never persisted. A
handler subscribed to a base event class also receives every subclass, so
subscribing to ``DomainEvent`` itself observes all study activity.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

EventHandler = Callable[..., Any]


class DomainEvent:
    """Base class for all domain events.

    Subclasses are dataclasses that call ``super().__init__()`` from
    ``__post_init__`` to receive an ``event_id`` and ``occurred_at``.
    """

    def __init__(self, event_id: str = "", occurred_at: datetime | None = None):
        self.event_id = event_id or str(uuid4())
        self.occurred_at = occurred_at or datetime.now(UTC)

    def __str__(self) -> str:
        return f"{self.event_name}(event_id={self.event_id})"

    @property
    def event_name(self) -> str:
        return self.__class__.__name__

    def payload(self) -> dict[str, Any]:
        """Event fields without the id and timestamp, for logging."""
        if dataclasses.is_dataclass(self):
            return dataclasses.asdict(self)
        return {}


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__name__", str(handler))


class EventBus:
    """Async publish/subscribe bus with per-handler error isolation."""

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = {}

    def handlers_for(self, event_type: type[DomainEvent]) -> list[EventHandler]:
        """Handlers of ``event_type`` and of its DomainEvent base classes."""
        handlers: list[EventHandler] = []
        for cls in event_type.__mro__:
            if isinstance(cls, type) and issubclass(cls, DomainEvent):
                handlers.extend(self._handlers.get(cls, []))
        return handlers

    async def publish(self, event: DomainEvent) -> None:
        """Run every matching handler concurrently; failures are only logged."""
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug(f"No handlers registered for {event.event_name}")
            return

        logger.debug(f"Publishing {event.event_name} to {len(handlers)} handlers")
        await asyncio.gather(*(self._dispatch(handler, event) for handler in handlers))

    async def _dispatch(self, handler: EventHandler, event: DomainEvent) -> None:
        try:
            if asyncio.iscoroutinefunction(handler):
                await handler(event)
            else:
                handler(event)
        except Exception as e:
            logger.error(
                f"Event handler {_handler_name(handler)} failed for "
                f"{event.event_name}: {e}"
            )

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Subscribe a sync or async handler to an event type and its subclasses."""
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed {_handler_name(handler)} to {event_type.__name__}")
