"""Event system for decoupling activity side effects from their producers."""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Protocol, Union

logger = logging.getLogger(__name__)

ACTIVITY_CREATED = "activity.created"
ACTIVITY_BULK_CREATED = "activity.bulk_created"


@dataclass(frozen=True)
class ActivityEvent:
    """Immutable named occurrence with an opaque payload."""

    type: str  # e.g. "activity.created", "activity.bulk_created"
    data: Any  # shape depends on type, never validated by the bus
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# Handlers may be plain functions or coroutines
EventHandler = Callable[[Any], Union[Awaitable[None], None]]


class EventBus(Protocol):
    """Protocol for event bus implementations."""

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe to specific event type."""
        ...

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """Unsubscribe from specific event type."""
        ...

    async def emit(self, event_type: str, payload: Any) -> None:
        """Deliver payload to every handler of event_type."""
        ...

    def listener_count(self, event_type: str) -> int:
        """Number of registrations for event_type."""
        ...

    def remove_all_listeners(self, event_type: str) -> None:
        """Drop every handler of event_type."""
        ...


class InProcessEventBus:
    """Simple in-process pub/sub.

    Handlers for one emit are all started before any is awaited. A failing
    handler is logged and never reaches the emitter or its siblings.
    Registering the same handler twice delivers twice.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[event_type]

    def listener_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, ()))

    def remove_all_listeners(self, event_type: str) -> None:
        self._handlers.pop(event_type, None)

    async def emit(self, event_type: str, payload: Any) -> None:
        handlers = list(self._handlers.get(event_type, ()))
        if not handlers:
            return
        await asyncio.gather(
            *(self._invoke(event_type, handler, payload) for handler in handlers)
        )

    async def publish(self, event: ActivityEvent) -> None:
        """Emit an ActivityEvent under its own type."""
        await self.emit(event.type, event)

    async def _invoke(self, event_type: str, handler: EventHandler, payload: Any) -> None:
        try:
            result = handler(payload)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                "Event handler %s failed for %s",
                getattr(handler, "__qualname__", repr(handler)),
                event_type,
            )
