"""Service layer for the Hasura gateway: health aggregation and events."""

from service_layer.config import (
    ServiceLayerConfig,
    PostgresConfig,
    HasuraConfig,
    SystemProbeConfig,
)
from service_layer.core import (
    ServiceLayer,
    ActivityEvent,
    EventHandler,
    EventBus,
    InProcessEventBus,
    HealthAggregator,
    build_fallback_report,
    AppMetadata,
    CompositeHealthReport,
    HealthProbeResult,
    ProbeStatus,
    DetachedTasks,
)
from service_layer.adapters.hasura import HasuraClient, UnavailableHasura

__all__ = [
    # Façade
    "ServiceLayer",
    # Config
    "ServiceLayerConfig",
    "PostgresConfig",
    "HasuraConfig",
    "SystemProbeConfig",
    # Events
    "ActivityEvent",
    "EventHandler",
    "EventBus",
    "InProcessEventBus",
    # Health
    "HealthAggregator",
    "build_fallback_report",
    "AppMetadata",
    "CompositeHealthReport",
    "HealthProbeResult",
    "ProbeStatus",
    "DetachedTasks",
    # Hasura
    "HasuraClient",
    "UnavailableHasura",
]
