"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from service_layer import ServiceLayer, ServiceLayerConfig
from gateway.activity.service import ActivityService
from gateway.activity.subscribers import (
    ActivityAuditTrail,
    ActivityCounter,
    register_activity_subscribers,
)
from gateway.config import GatewayConfig
from gateway.health.service import HealthReporter
from gateway.versions.sync import VersionSyncService

logger = logging.getLogger(__name__)


def _wire(app: FastAPI, layer: ServiceLayer, gateway_config: GatewayConfig) -> None:
    activity = ActivityService(
        layer.hasura,
        layer.events,
        pool=layer.postgres if layer.has_postgres else None,
    )
    register_activity_subscribers(layer.events, ActivityAuditTrail(), app.state.activity_counter)

    app.state.service_layer = layer
    app.state.activity = activity
    app.state.health_reporter = HealthReporter(
        layer,
        activity=activity,
        environment=layer.config.environment,
        started_at=layer.started_at,
        probe_timeout=layer.config.probe_timeout,
    )

    if gateway_config.version_sync:
        versions = VersionSyncService(
            layer.hasura,
            environment=layer.config.environment,
            app_version=gateway_config.app_version,
            git_commit=gateway_config.git_commit,
            build_time=gateway_config.build_time,
        )
        layer.tasks.spawn(versions.sync_version_on_startup(), name="version-sync")
    layer.tasks.spawn(activity.log_app_event("startup"), name="activity-app.startup")


def create_app(
    gateway_config: GatewayConfig | None = None,
    service_config: ServiceLayerConfig | None = None,
    service_layer: ServiceLayer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Pass service_config to have the app own the ServiceLayer lifecycle, or a
    ready service_layer that the caller starts and stops. With neither,
    every route still answers and /api/health reports the database down.
    """

    gateway_config = gateway_config or GatewayConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = False
        layer = service_layer
        # Startup: connect service layer
        if layer is None and service_config:
            layer = ServiceLayer(service_config)
            await layer.start()
            owned = True
        if layer is not None:
            _wire(app, layer, gateway_config)
        yield
        # Shutdown: disconnect service layer
        if layer is not None:
            await app.state.activity.log_app_event("shutdown")
            if owned:
                await layer.stop()
            else:
                await layer.tasks.drain(timeout=layer.config.probe_timeout)

    app = FastAPI(
        title=gateway_config.title,
        lifespan=lifespan,
        debug=gateway_config.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=gateway_config.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        allow_credentials=True,
    )

    app.state.gateway_config = gateway_config
    app.state.activity_counter = ActivityCounter()
    app.state.health_reporter = HealthReporter(None)

    # Register routes
    from gateway.health.routes import router as health_router
    from gateway.activity.routes import router as activity_router, legacy_router
    from gateway.hasura.routes import router as hasura_router

    app.include_router(health_router)
    app.include_router(activity_router)
    app.include_router(legacy_router)
    app.include_router(hasura_router)

    return app
