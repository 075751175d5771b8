"""Tests for HealthReporter."""

from unittest.mock import AsyncMock

import pytest

from gateway.health.service import HealthReporter
from service_layer.config import HasuraConfig, PostgresConfig, ServiceLayerConfig
from service_layer.core.aggregator import HealthAggregator
from service_layer.core.facade import ServiceLayer
from service_layer.core.health import ProbeStatus


@pytest.fixture
def layer(fake_database):
    layer = ServiceLayer(ServiceLayerConfig(postgres=PostgresConfig(), hasura=HasuraConfig()))
    layer._database = fake_database()
    return layer


@pytest.fixture
def activity():
    activity = AsyncMock()
    activity.log_health_check.return_value = True
    activity.log_error.return_value = True
    return activity


async def test_records_health_check(layer, activity, fake_graphql):
    layer._aggregator = HealthAggregator(layer.database, fake_graphql(), tasks=layer.tasks)
    reporter = HealthReporter(layer, activity=activity)

    report = await reporter.report()
    await layer.tasks.drain()

    assert report.fallback is False
    activity.log_health_check.assert_awaited_once_with()
    activity.log_error.assert_not_called()


async def test_records_failed_aggregation(layer, activity):
    reporter = HealthReporter(layer, activity=activity)

    report = await reporter.report()
    await layer.tasks.drain()

    assert report.fallback is True
    assert report.overall_status is ProbeStatus.UP
    activity.log_health_check.assert_awaited_once_with()
    activity.log_error.assert_awaited_once_with("health_check_failed")


async def test_last_deployed_from_api_version(layer, fake_graphql, sample_versions):
    layer._aggregator = HealthAggregator(
        layer.database, fake_graphql(versions=sample_versions), tasks=layer.tasks
    )
    reporter = HealthReporter(layer)

    response = await reporter.check()
    await layer.tasks.drain()

    assert response.info.deployment.last_deployed == "2025-01-01T00:00:00+00:00"


async def test_last_deployed_absent_without_api_version(layer, fake_graphql):
    layer._aggregator = HealthAggregator(layer.database, fake_graphql(), tasks=layer.tasks)

    response = await HealthReporter(layer).check()
    await layer.tasks.drain()

    assert response.info.deployment.last_deployed is None
    assert "last_deployed" not in response.to_json()["info"]["deployment"]
