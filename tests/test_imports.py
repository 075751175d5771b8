"""Smoke test: every public module imports."""

import importlib

import pytest

MODULES = [
    "service_layer",
    "service_layer.config",
    "service_layer.exceptions",
    "service_layer.core",
    "service_layer.core.aggregator",
    "service_layer.core.events",
    "service_layer.core.facade",
    "service_layer.core.health",
    "service_layer.core.tasks",
    "service_layer.adapters.hasura",
    "service_layer.adapters.postgres",
    "service_layer.adapters.system",
    "gateway",
    "gateway.app",
    "gateway.dependencies",
    "gateway.activity.routes",
    "gateway.health.routes",
    "gateway.hasura.routes",
    "gateway.versions",
]


@pytest.mark.parametrize("name", MODULES)
def test_import(name):
    importlib.import_module(name)


def test_public_api():
    from service_layer import ServiceLayer, InProcessEventBus, HealthAggregator  # noqa: F401
    from gateway import create_app, GatewayConfig  # noqa: F401
