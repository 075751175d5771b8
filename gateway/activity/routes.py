"""FastAPI routes for activity logging."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from service_layer.exceptions import ServiceLayerError

from gateway.activity.models import (
    CreateActivityInput,
    CreateBulkActivitiesInput,
    LegacyBulkInput,
)
from gateway.activity.service import ActivityService
from gateway.dependencies import ActivityCounterDep, ActivityServiceDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/activity", tags=["activity"])
legacy_router = APIRouter(prefix="/api/activities", tags=["activity", "deprecated"])


def _require(activity: Optional[ActivityService]) -> ActivityService:
    if activity is None:
        raise HTTPException(status_code=503, detail="Activity service not available")
    return activity


def _failure(error: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"success": False, "error": error}, status_code=status_code)


async def _log_bulk(activity: ActivityService, actions: list[str]) -> Any:
    try:
        result = await activity.log_bulk(actions)
    except (ServiceLayerError, KeyError):
        logger.exception("Failed to log bulk activities")
        return _failure("Failed to log bulk activities")
    return {
        "success": True,
        "data": {"created": result["count"], "activities": result["activities"]},
        "message": f"{result['count']} activities logged successfully",
    }


async def _recent(activity: ActivityService, limit: Optional[int]) -> dict[str, Any]:
    try:
        activities = await activity.recent(limit)
    except (ServiceLayerError, KeyError):
        logger.exception("Failed to fetch recent activities")
        return {"success": False, "error": "Failed to fetch activities"}
    return {"success": True, "data": activities, "message": "Recent activities fetched"}


@router.post("/log")
async def log_activity(body: CreateActivityInput, activity: ActivityServiceDep) -> Any:
    """Log one activity."""
    if not body.action or not body.action.strip():
        return _failure("Action is required", status_code=400)
    service = _require(activity)
    try:
        created = await service.log_activity(body.action)
    except (ServiceLayerError, KeyError):
        logger.exception("Failed to log activity")
        return _failure("Failed to log activity")
    return {"success": True, "data": created, "message": "Activity logged successfully"}


@router.post("/bulk")
async def log_bulk_activities(body: CreateBulkActivitiesInput, activity: ActivityServiceDep) -> Any:
    """Log many activities in one mutation."""
    actions = body.actions()
    if not actions:
        return _failure("Activities array is required", status_code=400)
    return await _log_bulk(_require(activity), actions)


@router.get("/recent")
async def recent_activities(activity: ActivityServiceDep, limit: Optional[int] = None) -> Any:
    return await _recent(_require(activity), limit)


@router.get("/stats")
async def activity_stats(activity: ActivityServiceDep, hours: Optional[int] = None) -> Any:
    service = _require(activity)
    try:
        stats = await service.stats(hours)
    except (ServiceLayerError, KeyError):
        logger.exception("Failed to fetch activity stats")
        return {"success": False, "error": "Failed to fetch activity statistics"}
    return {"success": True, "data": stats, "message": "Activity statistics fetched successfully"}


@router.get("/health")
async def activity_health(activity: ActivityServiceDep) -> Any:
    return await _require(activity).feature_health()


@router.get("/events")
async def activity_events(counter: ActivityCounterDep) -> Any:
    """Events delivered to in-process subscribers since startup."""
    return {"success": True, "data": counter.snapshot()}


@legacy_router.get("")
async def legacy_recent_activities(activity: ActivityServiceDep, limit: Optional[int] = None) -> Any:
    return await _recent(_require(activity), limit)


@legacy_router.post("/bulk")
async def legacy_bulk_activities(body: LegacyBulkInput, activity: ActivityServiceDep) -> Any:
    if not body.actions:
        return _failure("Invalid request: actions array required", status_code=400)
    return await _log_bulk(_require(activity), body.actions)
