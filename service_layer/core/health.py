"""Health check types and status merging."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Sequence, Union

PRIMARY_COMPONENT = "database"
GRAPHQL_COMPONENT = "graphql_engine"
API_COMPONENT = "api"


class ProbeStatus(str, Enum):
    """Normalized status of a probe or of a composite report."""

    UP = "up"
    DEGRADED = "degraded"
    DOWN = "down"


_STATUS_ALIASES: dict[str, ProbeStatus] = {
    "up": ProbeStatus.UP,
    "ok": ProbeStatus.UP,
    "healthy": ProbeStatus.UP,
    "degraded": ProbeStatus.DEGRADED,
    "down": ProbeStatus.DOWN,
    "shutting_down": ProbeStatus.DOWN,
    "error": ProbeStatus.DOWN,
    "unhealthy": ProbeStatus.DOWN,
}


def normalize_status(value: Union[ProbeStatus, str, bool, None]) -> ProbeStatus:
    """Map any probe vocabulary onto {up, degraded, down}.

    Unknown values count as down.
    """
    if isinstance(value, ProbeStatus):
        return value
    if isinstance(value, bool):
        return ProbeStatus.UP if value else ProbeStatus.DOWN
    if value is None:
        return ProbeStatus.DOWN
    return _STATUS_ALIASES.get(str(value).strip().lower(), ProbeStatus.DOWN)


def merge_status(
    primary: ProbeStatus, secondaries: Sequence[ProbeStatus] = ()
) -> ProbeStatus:
    """Combine component statuses: down > degraded > up.

    Only the primary dependency can take the whole report down; a failing
    secondary degrades it.
    """
    if primary is ProbeStatus.DOWN:
        return ProbeStatus.DOWN
    if primary is ProbeStatus.DEGRADED:
        return ProbeStatus.DEGRADED
    if any(status is not ProbeStatus.UP for status in secondaries):
        return ProbeStatus.DEGRADED
    return ProbeStatus.UP


@dataclass(frozen=True)
class HealthProbeResult:
    """Outcome of a single dependency check."""

    status: ProbeStatus
    response_time_ms: Optional[float] = None
    error: Optional[str] = None
    timestamp: Optional[datetime] = None
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Collaborators may report in a richer vocabulary (ok, shutting_down, ...)
        reported = self.status
        status = normalize_status(reported)
        object.__setattr__(self, "status", status)
        if status is ProbeStatus.DOWN and self.error is None:
            label = reported.value if isinstance(reported, ProbeStatus) else reported
            object.__setattr__(self, "error", f"reported status: {label}")

    @classmethod
    def up(
        cls,
        response_time_ms: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        **details: Any,
    ) -> "HealthProbeResult":
        return cls(
            status=ProbeStatus.UP,
            response_time_ms=response_time_ms,
            timestamp=timestamp or datetime.now(timezone.utc),
            details=details,
        )

    @classmethod
    def down(
        cls,
        error: str,
        response_time_ms: Optional[float] = None,
        **details: Any,
    ) -> "HealthProbeResult":
        return cls(
            status=ProbeStatus.DOWN,
            response_time_ms=response_time_ms,
            error=error,
            timestamp=datetime.now(timezone.utc),
            details=details,
        )

    @property
    def is_up(self) -> bool:
        return self.status is ProbeStatus.UP


@dataclass(frozen=True)
class AppMetadata:
    """Deployed version of one component, as stored in app_metadata."""

    component: str
    version: str
    deployed_at: str
    git_commit: Optional[str] = None
    metadata: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AppMetadata":
        return cls(
            component=row["component"],
            version=row["version"],
            deployed_at=str(row.get("deployed_at", "")),
            git_commit=row.get("git_commit"),
            metadata=row.get("metadata"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "component": self.component,
            "version": self.version,
            "deployed_at": self.deployed_at,
        }
        if self.git_commit is not None:
            data["git_commit"] = self.git_commit
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class CompositeHealthReport:
    """Merged view of every probe, returned to the caller."""

    overall_status: ProbeStatus
    component_statuses: Mapping[str, ProbeStatus]
    response_times: Mapping[str, float]
    errors: Optional[Mapping[str, str]] = None
    versions: Sequence[AppMetadata] = ()
    probes: Mapping[str, HealthProbeResult] = field(default_factory=dict)
    fallback: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_snapshot(self) -> dict[str, Any]:
        """Shape persisted to the health_snapshots table."""
        snapshot: dict[str, Any] = {
            "overall_status": self.overall_status.value,
            "component_statuses": {
                name: status.value for name, status in self.component_statuses.items()
            },
            "response_times": dict(self.response_times),
        }
        if self.errors:
            snapshot["errors"] = dict(self.errors)
        return snapshot


class DatabaseProbe(Protocol):
    """Anything that can report database liveness."""

    async def check_connection(self) -> HealthProbeResult:
        ...


class GraphQLEngine(Protocol):
    """The narrow slice of the GraphQL engine the aggregator relies on."""

    async def test_connection(self) -> bool:
        ...

    async def get_metadata(self, environment: str) -> list[AppMetadata]:
        ...

    async def record_snapshot(self, snapshot: Mapping[str, Any]) -> bool:
        ...


class SystemProbe(Protocol):
    """Process-local check (uptime, memory, disk)."""

    name: str

    def check(self) -> HealthProbeResult:
        ...
