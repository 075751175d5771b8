"""Database liveness probes backed by an asyncpg pool."""

import logging
import time

import asyncpg

from service_layer.core.health import HealthProbeResult

logger = logging.getLogger(__name__)


class PostgresProbe:
    """Lease one pooled connection, run a trivial query, release it."""

    def __init__(self, pool: asyncpg.Pool, timeout: float = 3.0) -> None:
        self._pool = pool
        self._timeout = timeout

    async def check_connection(self) -> HealthProbeResult:
        started = time.perf_counter()
        try:
            async with self._pool.acquire(timeout=self._timeout) as conn:
                now = await conn.fetchval("SELECT NOW()", timeout=self._timeout)
        except Exception as e:
            logger.error("Database connection failed: %s", e)
            return HealthProbeResult.down(
                str(e) or "Unknown database error",
                round((time.perf_counter() - started) * 1000, 1),
            )
        return HealthProbeResult.up(
            round((time.perf_counter() - started) * 1000, 1),
            timestamp=now,
        )


class UnavailableDatabase:
    """Stand-in used when no pool could be created at startup."""

    def __init__(self, reason: str = "not connected") -> None:
        self.reason = reason

    async def check_connection(self) -> HealthProbeResult:
        return HealthProbeResult.down(self.reason)


async def create_pool(
    dsn: str,
    min_size: int = 1,
    max_size: int = 10,
    command_timeout: float = 5.0,
) -> asyncpg.Pool:
    return await asyncpg.create_pool(
        dsn=dsn,
        min_size=min_size,
        max_size=max_size,
        command_timeout=command_timeout,
    )
