"""FastAPI dependency injection."""

from typing import Annotated, Optional

from fastapi import Depends, Request

from service_layer import ServiceLayer
from gateway.activity.service import ActivityService
from gateway.activity.subscribers import ActivityCounter
from gateway.health.service import HealthReporter


async def get_service_layer(request: Request) -> Optional[ServiceLayer]:
    """Get the ServiceLayer instance from app state, if one was started."""
    return getattr(request.app.state, "service_layer", None)


async def get_activity_service(request: Request) -> Optional[ActivityService]:
    return getattr(request.app.state, "activity", None)


async def get_activity_counter(request: Request) -> ActivityCounter:
    return request.app.state.activity_counter


async def get_health_reporter(request: Request) -> HealthReporter:
    return request.app.state.health_reporter


ServiceLayerDep = Annotated[Optional[ServiceLayer], Depends(get_service_layer)]
ActivityServiceDep = Annotated[Optional[ActivityService], Depends(get_activity_service)]
ActivityCounterDep = Annotated[ActivityCounter, Depends(get_activity_counter)]
HealthReporterDep = Annotated[HealthReporter, Depends(get_health_reporter)]
