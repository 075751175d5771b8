"""Async Hasura client built on httpx.

HasuraClient talks to a configured engine. UnavailableHasura has the same
surface and is used when the engine was never configured, so callers never
need to check for a missing client.
"""

import logging
from typing import Any, Mapping, Optional, Union

import httpx

from service_layer.config import HasuraConfig
from service_layer.core.health import AppMetadata
from service_layer.exceptions import HasuraRequestError, HasuraUnavailableError

logger = logging.getLogger(__name__)

INTROSPECTION_QUERY = "query { __schema { queryType { name } } }"

GET_APP_METADATA = """
  query GetVersions($env: String!) {
    app_metadata(where: {environment: {_eq: $env}}) {
      component
      version
      deployed_at
      git_commit
      metadata
    }
  }
"""

RECORD_HEALTH_SNAPSHOT = """
  mutation RecordHealthSnapshot($snapshot: health_snapshots_insert_input!) {
    insert_health_snapshots_one(object: $snapshot) {
      id
      timestamp
    }
  }
"""

UPDATE_APP_METADATA = """
  mutation UpdateAppMetadata($component: String!, $version: String!, $environment: String!, $git_commit: String, $metadata: jsonb) {
    insert_app_metadata_one(
      object: {
        component: $component
        version: $version
        environment: $environment
        git_commit: $git_commit
        metadata: $metadata
      }
      on_conflict: {
        constraint: app_metadata_component_environment_key
        update_columns: [version, deployed_at, git_commit, metadata]
      }
    ) {
      id
      component
      version
      deployed_at
    }
  }
"""


def metadata_url(graphql_url: str) -> str:
    """Derive the metadata API endpoint from the GraphQL endpoint."""
    base = graphql_url.rstrip("/")
    if base.endswith("/v1/graphql"):
        base = base[: -len("/v1/graphql")]
    return f"{base}/v1/metadata"


class HasuraClient:
    """GraphQL and metadata access to a configured Hasura engine."""

    def __init__(
        self,
        url: str,
        admin_secret: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._metadata_url = metadata_url(url)
        self._client = httpx.AsyncClient(
            headers={"x-hasura-admin-secret": admin_secret},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, url: str, payload: Mapping[str, Any]) -> Any:
        try:
            resp = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise HasuraRequestError(f"Hasura request failed: {e}") from e

        if resp.status_code >= 400:
            detail = resp.text
            try:
                detail = resp.json().get("error", resp.text)
            except (ValueError, AttributeError):
                pass
            raise HasuraRequestError(
                f"Hasura returned {resp.status_code}: {detail}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise HasuraRequestError("Hasura returned a non-JSON body") from e

    async def request(
        self, query: str, variables: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        """Execute a GraphQL document and return its data block."""
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = dict(variables)
        body = await self._post(self._url, payload)
        if body.get("errors"):
            errors = body["errors"]
            message = errors[0].get("message", "GraphQL error") if errors else "GraphQL error"
            raise HasuraRequestError(message, errors=errors)
        return body.get("data") or {}

    async def metadata(self, operation: str, args: Mapping[str, Any]) -> Any:
        """Call the metadata API (table tracking, export)."""
        return await self._post(self._metadata_url, {"type": operation, "args": dict(args)})

    async def test_connection(self) -> bool:
        try:
            await self.request(INTROSPECTION_QUERY)
        except HasuraRequestError as e:
            logger.error("Hasura connection test failed: %s", e)
            return False
        return True

    async def get_metadata(self, environment: str = "production") -> list[AppMetadata]:
        try:
            data = await self.request(GET_APP_METADATA, {"env": environment})
        except HasuraRequestError as e:
            logger.error("Failed to fetch app metadata from Hasura: %s", e)
            return []
        return [AppMetadata.from_row(row) for row in data.get("app_metadata", [])]

    async def record_snapshot(self, snapshot: Mapping[str, Any]) -> bool:
        try:
            await self.request(RECORD_HEALTH_SNAPSHOT, {"snapshot": dict(snapshot)})
        except HasuraRequestError as e:
            logger.error("Failed to record health snapshot: %s", e)
            return False
        return True

    async def update_app_metadata(
        self,
        component: str,
        version: str,
        environment: str = "production",
        git_commit: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        try:
            await self.request(
                UPDATE_APP_METADATA,
                {
                    "component": component,
                    "version": version,
                    "environment": environment,
                    "git_commit": git_commit,
                    "metadata": dict(metadata) if metadata is not None else None,
                },
            )
        except HasuraRequestError as e:
            logger.error("Failed to update app metadata: %s", e)
            return False
        return True

    async def get_tracked_tables(self, source: str = "default") -> list[str]:
        exported = await self.metadata("export_metadata", {})
        # v2 metadata nests tables under sources; v1 keeps them at the top level
        for entry in exported.get("sources", []):
            if entry.get("name") == source:
                return [t["table"]["name"] for t in entry.get("tables", [])]
        return [t["table"]["name"] for t in exported.get("tables", [])]

    async def track_table(
        self, name: str, schema: str = "public", source: str = "default"
    ) -> None:
        await self.metadata(
            "pg_track_table",
            {"source": source, "table": {"schema": schema, "name": name}},
        )


class UnavailableHasura:
    """Null client for processes started without Hasura configuration."""

    def __init__(self, reason: str = "Hasura is not configured") -> None:
        self.reason = reason

    async def aclose(self) -> None:
        return None

    async def request(
        self, query: str, variables: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        raise HasuraUnavailableError(self.reason)

    async def metadata(self, operation: str, args: Mapping[str, Any]) -> Any:
        raise HasuraUnavailableError(self.reason)

    async def test_connection(self) -> bool:
        return False

    async def get_metadata(self, environment: str = "production") -> list[AppMetadata]:
        logger.debug("Hasura unavailable - returning empty metadata")
        return []

    async def record_snapshot(self, snapshot: Mapping[str, Any]) -> bool:
        logger.debug("Hasura unavailable - skipping health snapshot")
        return False

    async def update_app_metadata(
        self,
        component: str,
        version: str,
        environment: str = "production",
        git_commit: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        logger.debug("Hasura unavailable - skipping metadata update")
        return False

    async def get_tracked_tables(self, source: str = "default") -> list[str]:
        return []

    async def track_table(
        self, name: str, schema: str = "public", source: str = "default"
    ) -> None:
        raise HasuraUnavailableError(self.reason)


Hasura = Union[HasuraClient, UnavailableHasura]


def build_hasura_client(
    config: HasuraConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Hasura:
    """Resolve the configured/unavailable variant once, at startup."""
    if not config.url:
        logger.warning("HASURA_URL is not set - Hasura features will be disabled")
        return UnavailableHasura("HASURA_URL is not set")
    if not config.admin_secret:
        logger.warning("HASURA_ADMIN_SECRET is not set - Hasura features will be disabled")
        return UnavailableHasura("HASURA_ADMIN_SECRET is not set")
    logger.info("Hasura client initialized for %s", config.url)
    return HasuraClient(config.url, config.admin_secret, config.timeout, transport=transport)
