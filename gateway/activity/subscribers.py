"""Event bus consumers for activity events."""

import logging
from collections import Counter
from typing import Any

from service_layer.core.events import (
    ACTIVITY_BULK_CREATED,
    ACTIVITY_CREATED,
    ActivityEvent,
    EventBus,
)

logger = logging.getLogger(__name__)

ACTIVITY_EVENT_TYPES = (ACTIVITY_CREATED, ACTIVITY_BULK_CREATED)


class ActivityAuditTrail:
    """Writes every activity event to the audit logger."""

    def __init__(self, audit_logger: logging.Logger = logger) -> None:
        self._logger = audit_logger

    async def __call__(self, event: ActivityEvent) -> None:
        self._logger.info("audit %s at %s: %s", event.type, event.timestamp.isoformat(), event.data)


class ActivityCounter:
    """In-memory count of delivered events per type."""

    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()

    def __call__(self, event: ActivityEvent) -> None:
        self._counts[event.type] += 1

    def snapshot(self) -> dict[str, Any]:
        return {"total": sum(self._counts.values()), "by_type": dict(self._counts)}


def register_activity_subscribers(
    events: EventBus, audit: ActivityAuditTrail, counter: ActivityCounter
) -> None:
    for event_type in ACTIVITY_EVENT_TYPES:
        events.subscribe(event_type, audit)
        events.subscribe(event_type, counter)
