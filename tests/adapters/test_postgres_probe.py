"""Tests for the Postgres liveness probe."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from service_layer.adapters.postgres.probe import PostgresProbe, UnavailableDatabase
from service_layer.core.health import ProbeStatus


class FakeAcquire:
    def __init__(self, conn=None, exc=None) -> None:
        self.conn = conn
        self.exc = exc
        self.released = False

    async def __aenter__(self):
        if self.exc is not None:
            raise self.exc
        return self.conn

    async def __aexit__(self, *exc_info):
        self.released = True
        return False


def make_pool(conn=None, exc=None):
    lease = FakeAcquire(conn, exc)
    pool = MagicMock()
    pool.acquire = MagicMock(return_value=lease)
    return pool, lease


async def test_probe_up():
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    conn = MagicMock()
    conn.fetchval = AsyncMock(return_value=now)
    pool, lease = make_pool(conn)

    result = await PostgresProbe(pool, timeout=1.0).check_connection()

    assert result.status is ProbeStatus.UP
    assert result.timestamp == now
    assert result.response_time_ms is not None
    conn.fetchval.assert_awaited_once_with("SELECT NOW()", timeout=1.0)
    assert lease.released


async def test_probe_query_failure_releases_connection():
    conn = MagicMock()
    conn.fetchval = AsyncMock(side_effect=RuntimeError("query failed"))
    pool, lease = make_pool(conn)

    result = await PostgresProbe(pool).check_connection()

    assert result.status is ProbeStatus.DOWN
    assert result.error == "query failed"
    assert lease.released


async def test_probe_pool_exhaustion():
    pool, _ = make_pool(exc=TimeoutError())

    result = await PostgresProbe(pool).check_connection()

    assert result.status is ProbeStatus.DOWN
    assert result.error == "Unknown database error"


async def test_unavailable_database():
    result = await UnavailableDatabase("not connected").check_connection()

    assert result.status is ProbeStatus.DOWN
    assert result.error == "not connected"
