"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any, Mapping, Optional

import pytest

from service_layer.core.health import AppMetadata, HealthProbeResult


class FakeDatabase:
    """Database probe double with a scripted outcome."""

    def __init__(
        self,
        result: Optional[HealthProbeResult] = None,
        exc: Optional[BaseException] = None,
        delay: float = 0.0,
    ) -> None:
        self.result = result or HealthProbeResult.up(1.5)
        self.exc = exc
        self.delay = delay
        self.calls = 0

    async def check_connection(self) -> HealthProbeResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.result


class FakeGraphQL:
    """GraphQL engine double recording snapshots."""

    def __init__(
        self,
        available: bool = True,
        versions: Optional[list[AppMetadata]] = None,
        test_exc: Optional[BaseException] = None,
        metadata_exc: Optional[BaseException] = None,
        snapshot_exc: Optional[BaseException] = None,
        snapshot_delay: float = 0.0,
        test_delay: float = 0.0,
    ) -> None:
        self.available = available
        self.versions = versions or []
        self.test_exc = test_exc
        self.metadata_exc = metadata_exc
        self.snapshot_exc = snapshot_exc
        self.snapshot_delay = snapshot_delay
        self.test_delay = test_delay
        self.snapshots: list[Mapping[str, Any]] = []
        self.metadata_calls: list[str] = []

    async def test_connection(self) -> bool:
        if self.test_delay:
            await asyncio.sleep(self.test_delay)
        if self.test_exc is not None:
            raise self.test_exc
        return self.available

    async def get_metadata(self, environment: str) -> list[AppMetadata]:
        self.metadata_calls.append(environment)
        if self.metadata_exc is not None:
            raise self.metadata_exc
        return list(self.versions)

    async def record_snapshot(self, snapshot: Mapping[str, Any]) -> bool:
        if self.snapshot_delay:
            await asyncio.sleep(self.snapshot_delay)
        if self.snapshot_exc is not None:
            raise self.snapshot_exc
        self.snapshots.append(snapshot)
        return True


@pytest.fixture
def fake_database():
    return FakeDatabase


@pytest.fixture
def fake_graphql():
    return FakeGraphQL


@pytest.fixture
def sample_versions() -> list[AppMetadata]:
    return [
        AppMetadata(
            component="api",
            version="1.4.0",
            deployed_at="2025-01-01T00:00:00+00:00",
            git_commit="abc1234def",
        ),
        AppMetadata(component="web", version="1.3.2", deployed_at="2024-12-30T10:00:00+00:00"),
    ]
