"""Activity logging through Hasura's generated mutations."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional, Sequence

import asyncpg

from service_layer.adapters.hasura.client import Hasura
from service_layer.core.events import (
    ACTIVITY_BULK_CREATED,
    ACTIVITY_CREATED,
    ActivityEvent,
    InProcessEventBus,
)
from service_layer.exceptions import ServiceLayerError

from gateway.activity import queries

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_HOURS = 24


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


class ActivityService:
    """Writes and reads the activity_log table.

    Events are published only after the write went through.
    """

    def __init__(
        self,
        hasura: Hasura,
        events: InProcessEventBus,
        pool: Optional[asyncpg.Pool] = None,
    ) -> None:
        self._hasura = hasura
        self._events = events
        self._pool = pool

    async def log_activity(self, action: str) -> dict[str, Any]:
        """Insert one activity via Hasura. Raises on failure."""
        data = await self._hasura.request(
            queries.CREATE_ACTIVITY, {"activity": {"action": action}}
        )
        activity = data["insert_activity_log_one"]
        await self._events.publish(ActivityEvent(type=ACTIVITY_CREATED, data=activity))
        return activity

    async def log_bulk(self, actions: Sequence[str]) -> dict[str, Any]:
        """Insert many activities in one mutation. Raises on failure."""
        data = await self._hasura.request(
            queries.CREATE_BULK_ACTIVITIES,
            {"activities": [{"action": action} for action in actions]},
        )
        inserted = data["insert_activity_log"]
        result = {
            "count": inserted["affected_rows"],
            "activities": inserted["returning"],
        }
        await self._events.publish(ActivityEvent(type=ACTIVITY_BULK_CREATED, data=result))
        return result

    async def recent(self, limit: Optional[int] = DEFAULT_LIMIT) -> list[dict[str, Any]]:
        data = await self._hasura.request(
            queries.GET_RECENT_ACTIVITIES, {"limit": clamp_limit(limit)}
        )
        return data["activity_log"]

    async def stats(self, hours: Optional[int] = DEFAULT_HOURS) -> dict[str, Any]:
        hours = hours or DEFAULT_HOURS
        since = datetime.now(timezone.utc) - timedelta(hours=hours)
        data = await self._hasura.request(
            queries.GET_ACTIVITY_STATS, {"since": since.isoformat()}
        )
        return {
            "totalActivities": data["activity_log_aggregate"]["aggregate"]["count"],
            "timeRange": f"{hours} hours",
            "topActions": [item["action"] for item in data["recent_actions"]],
        }

    async def feature_health(self) -> dict[str, Any]:
        try:
            await self._hasura.request(queries.GET_ACTIVITY_COUNT)
        except ServiceLayerError as e:
            return {
                "status": "unhealthy",
                "feature": "activity",
                "hasura_available": False,
                "error": str(e),
            }
        return {"status": "healthy", "feature": "activity", "hasura_available": True}

    async def log(self, action: str) -> bool:
        """Best-effort logging: Hasura first, then a direct insert."""
        try:
            await self.log_activity(action)
            return True
        except (ServiceLayerError, KeyError) as e:
            logger.warning("Activity logging via Hasura unavailable for %s: %s", action, e)
        return await self._log_direct(action)

    async def _log_direct(self, action: str) -> bool:
        if self._pool is None:
            logger.warning("Database unavailable for activity logging: %s", action)
            return False
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(queries.INSERT_ACTIVITY_SQL, action)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, TimeoutError) as e:
            logger.error("Failed to log activity directly: %s (%s)", action, e)
            return False
        await self._events.publish(
            ActivityEvent(type=ACTIVITY_CREATED, data={"action": action, "source": "direct"})
        )
        return True

    async def log_health_check(self) -> bool:
        return await self.log("health.check")

    async def log_error(self, error_type: str) -> bool:
        return await self.log(f"error.{error_type}")

    async def log_app_event(self, event: Literal["startup", "shutdown", "restart"]) -> bool:
        return await self.log(f"app.{event}")
