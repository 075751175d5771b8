"""Tests for the Hasura client."""

import json

import httpx
import pytest

from service_layer.adapters.hasura.client import (
    HasuraClient,
    UnavailableHasura,
    build_hasura_client,
    metadata_url,
)
from service_layer.config import HasuraConfig
from service_layer.exceptions import HasuraRequestError, HasuraUnavailableError

GRAPHQL_URL = "http://hasura.test/v1/graphql"


def make_client(handler) -> tuple[HasuraClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = HasuraClient(GRAPHQL_URL, "s3cret", transport=httpx.MockTransport(recording))
    return client, seen


def body_of(request: httpx.Request) -> dict:
    return json.loads(request.content)


def test_metadata_url():
    assert metadata_url("http://h:8080/v1/graphql") == "http://h:8080/v1/metadata"
    assert metadata_url("http://h:8080/v1/graphql/") == "http://h:8080/v1/metadata"
    assert metadata_url("http://h:8080") == "http://h:8080/v1/metadata"


async def test_request_sends_admin_secret_and_variables():
    client, seen = make_client(lambda r: httpx.Response(200, json={"data": {"ok": 1}}))

    data = await client.request("query Q { ok }", {"a": 1})

    assert data == {"ok": 1}
    assert seen[0].headers["x-hasura-admin-secret"] == "s3cret"
    assert body_of(seen[0]) == {"query": "query Q { ok }", "variables": {"a": 1}}
    await client.aclose()


async def test_graphql_errors_raise():
    client, _ = make_client(
        lambda r: httpx.Response(200, json={"errors": [{"message": "field not found"}]})
    )

    with pytest.raises(HasuraRequestError) as excinfo:
        await client.request("query { nope }")

    assert str(excinfo.value) == "field not found"
    assert excinfo.value.errors == [{"message": "field not found"}]
    await client.aclose()


async def test_http_error_carries_status():
    client, _ = make_client(lambda r: httpx.Response(500, json={"error": "internal"}))

    with pytest.raises(HasuraRequestError) as excinfo:
        await client.request("query { x }")

    assert excinfo.value.status_code == 500
    await client.aclose()


async def test_test_connection_true_and_false():
    ok, _ = make_client(lambda r: httpx.Response(200, json={"data": {"__schema": {}}}))
    assert await ok.test_connection() is True
    await ok.aclose()

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    broken, _ = make_client(refuse)
    assert await broken.test_connection() is False
    await broken.aclose()


async def test_get_metadata_parses_rows():
    rows = [
        {
            "component": "api",
            "version": "2.0.0",
            "deployed_at": "2025-02-01T00:00:00Z",
            "git_commit": "deadbeef",
            "metadata": None,
        }
    ]
    client, seen = make_client(lambda r: httpx.Response(200, json={"data": {"app_metadata": rows}}))

    versions = await client.get_metadata("staging")

    assert versions[0].component == "api"
    assert versions[0].git_commit == "deadbeef"
    assert body_of(seen[0])["variables"] == {"env": "staging"}
    await client.aclose()


async def test_get_metadata_failure_returns_empty():
    client, _ = make_client(lambda r: httpx.Response(503, text="unavailable"))

    assert await client.get_metadata() == []
    await client.aclose()


async def test_record_snapshot():
    client, seen = make_client(
        lambda r: httpx.Response(200, json={"data": {"insert_health_snapshots_one": {"id": 1}}})
    )
    snapshot = {"overall_status": "up", "component_statuses": {"database": "up"}}

    assert await client.record_snapshot(snapshot) is True
    assert body_of(seen[0])["variables"] == {"snapshot": snapshot}
    await client.aclose()


async def test_record_snapshot_failure_returns_false():
    client, _ = make_client(lambda r: httpx.Response(200, json={"errors": [{"message": "nope"}]}))

    assert await client.record_snapshot({"overall_status": "down"}) is False
    await client.aclose()


async def test_update_app_metadata():
    client, seen = make_client(
        lambda r: httpx.Response(200, json={"data": {"insert_app_metadata_one": {"id": 3}}})
    )

    ok = await client.update_app_metadata("api", "1.2.3", "production", git_commit="abc")

    assert ok is True
    variables = body_of(seen[0])["variables"]
    assert variables["component"] == "api"
    assert variables["git_commit"] == "abc"
    await client.aclose()


async def test_tracked_tables_and_track_table():
    exported = {
        "version": 3,
        "sources": [
            {
                "name": "default",
                "tables": [
                    {"table": {"schema": "public", "name": "activity_log"}},
                    {"table": {"schema": "public", "name": "app_metadata"}},
                ],
            }
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/metadata"
        if body_of(request)["type"] == "export_metadata":
            return httpx.Response(200, json=exported)
        return httpx.Response(200, json={"message": "success"})

    client, seen = make_client(handler)

    assert await client.get_tracked_tables() == ["activity_log", "app_metadata"]
    await client.track_table("health_snapshots")

    assert body_of(seen[1]) == {
        "type": "pg_track_table",
        "args": {"source": "default", "table": {"schema": "public", "name": "health_snapshots"}},
    }
    await client.aclose()


async def test_unavailable_hasura_surface():
    hasura = UnavailableHasura("HASURA_URL is not set")

    assert await hasura.test_connection() is False
    assert await hasura.get_metadata("production") == []
    assert await hasura.record_snapshot({}) is False
    assert await hasura.update_app_metadata("api", "1.0.0") is False
    assert await hasura.get_tracked_tables() == []
    with pytest.raises(HasuraUnavailableError):
        await hasura.request("query { x }")
    with pytest.raises(HasuraUnavailableError):
        await hasura.track_table("t")


def test_build_hasura_client_variants():
    assert isinstance(build_hasura_client(HasuraConfig()), UnavailableHasura)
    assert isinstance(
        build_hasura_client(HasuraConfig(url=GRAPHQL_URL)), UnavailableHasura
    )
    client = build_hasura_client(HasuraConfig(url=GRAPHQL_URL, admin_secret="x"))
    assert isinstance(client, HasuraClient)
