"""Core components for the service layer."""

from service_layer.core.aggregator import HealthAggregator, build_fallback_report
from service_layer.core.events import ActivityEvent, EventBus, EventHandler, InProcessEventBus
from service_layer.core.facade import ServiceLayer
from service_layer.core.health import (
    AppMetadata,
    CompositeHealthReport,
    HealthProbeResult,
    ProbeStatus,
    merge_status,
    normalize_status,
)
from service_layer.core.tasks import DetachedTasks

__all__ = [
    "ActivityEvent",
    "EventHandler",
    "EventBus",
    "InProcessEventBus",
    "ServiceLayer",
    "HealthAggregator",
    "build_fallback_report",
    "AppMetadata",
    "CompositeHealthReport",
    "HealthProbeResult",
    "ProbeStatus",
    "merge_status",
    "normalize_status",
    "DetachedTasks",
]
