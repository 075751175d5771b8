"""Tests for the Hasura table sync routes."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from gateway.app import create_app
from service_layer.config import HasuraConfig, PostgresConfig, ServiceLayerConfig
from service_layer.core.facade import ServiceLayer
from service_layer.exceptions import HasuraRequestError


class FakeAcquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *exc_info):
        return False


@pytest.fixture
def hasura():
    hasura = AsyncMock()
    hasura.test_connection.return_value = True
    hasura.get_tracked_tables.return_value = ["activity_log"]
    return hasura


@pytest.fixture
def layer(hasura):
    layer = ServiceLayer(ServiceLayerConfig(postgres=PostgresConfig(), hasura=HasuraConfig()))
    conn = MagicMock()
    conn.fetch = AsyncMock(
        return_value=[{"table_name": "activity_log"}, {"table_name": "health_snapshots"}]
    )
    pool = MagicMock()
    pool.acquire = MagicMock(return_value=FakeAcquire(conn))
    layer._postgres = pool
    layer._hasura = hasura
    return layer


def client_with(layer) -> TestClient:
    app = create_app()
    if layer is not None:
        app.state.service_layer = layer
    return TestClient(app)


def test_sync_tracks_new_tables(layer, hasura):
    response = client_with(layer).post("/api/hasura/sync")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Synced 1 new tables",
        "results": [{"table": "health_snapshots", "status": "tracked"}],
        "tracked_tables": 1,
        "new_tables": 1,
    }
    hasura.track_table.assert_awaited_once_with("health_snapshots")


def test_sync_reports_per_table_errors(layer, hasura):
    hasura.track_table.side_effect = HasuraRequestError("already tracked")

    body = client_with(layer).post("/api/hasura/sync").json()

    assert body["success"] is True
    assert body["results"] == [
        {"table": "health_snapshots", "status": "error", "error": "already tracked"}
    ]


def test_sync_metadata_failure(layer, hasura):
    hasura.get_tracked_tables.side_effect = HasuraRequestError("metadata unavailable")

    response = client_with(layer).post("/api/hasura/sync")

    assert response.status_code == 500
    assert response.json()["details"] == "metadata unavailable"


def test_sync_without_database(layer):
    layer._postgres = None

    for client in (client_with(layer), client_with(None)):
        response = client.post("/api/hasura/sync")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Database not available"}


def test_status(layer):
    assert client_with(layer).get("/api/hasura/status").json() == {
        "hasura_available": True,
        "tracked_tables_count": 1,
        "tracked_tables": ["activity_log"],
    }


def test_status_when_unreachable(layer, hasura):
    hasura.test_connection.return_value = False

    body = client_with(layer).get("/api/hasura/status").json()

    assert body == {"hasura_available": False, "tracked_tables_count": 0, "tracked_tables": []}
    hasura.get_tracked_tables.assert_not_called()
