"""Health reporting: aggregation with a database-only fallback."""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from service_layer.adapters.postgres.probe import UnavailableDatabase
from service_layer.adapters.system.probes import UptimeProbe
from service_layer.core.aggregator import build_fallback_report
from service_layer.core.facade import ServiceLayer
from service_layer.core.health import (
    API_COMPONENT,
    GRAPHQL_COMPONENT,
    PRIMARY_COMPONENT,
    CompositeHealthReport,
    ProbeStatus,
)

from gateway.health.models import (
    AppMetadataModel,
    DeploymentInfo,
    HealthCheckResponse,
    HealthIndicator,
    HealthInfo,
)

if TYPE_CHECKING:
    from gateway.activity.service import ActivityService

logger = logging.getLogger(__name__)

SYSTEM_DETAILS = ("uptime", "memory_heap", "disk")


class HealthReporter:
    """Build the /api/health response.

    The aggregator is asked first. If aggregation itself raises, a reduced
    report is built from the database probe alone.
    """

    def __init__(
        self,
        layer: Optional[ServiceLayer],
        activity: Optional["ActivityService"] = None,
        environment: str = "production",
        started_at: Optional[datetime] = None,
        probe_timeout: float = 3.0,
    ) -> None:
        self._layer = layer
        self._activity = activity
        self._environment = environment
        self._uptime = UptimeProbe(started_at or datetime.now(timezone.utc))
        self._probe_timeout = probe_timeout

    def _record(self, log: Callable[["ActivityService"], Awaitable[bool]], name: str) -> None:
        if self._activity is None or self._layer is None:
            return
        self._layer.tasks.spawn(log(self._activity), name=name)

    async def report(self) -> CompositeHealthReport:
        self._record(lambda activity: activity.log_health_check(), "activity-health.check")
        try:
            return await self._layer.aggregator.check_health()
        except Exception:
            logger.exception("Enhanced health check failed, falling back to basic check")
            self._record(
                lambda activity: activity.log_error("health_check_failed"),
                "activity-error.health_check_failed",
            )
            database = (
                self._layer.database
                if self._layer is not None
                else UnavailableDatabase("service layer not started")
            )
            return await build_fallback_report(database, self._probe_timeout)

    async def check(self) -> HealthCheckResponse:
        return self.to_response(await self.report())

    def to_response(self, report: CompositeHealthReport) -> HealthCheckResponse:
        details: dict[str, HealthIndicator] = {}

        for name in SYSTEM_DETAILS:
            result = report.probes.get(name)
            if result is None and name == "uptime":
                result = self._uptime.check()
            if result is not None:
                details[name] = HealthIndicator.from_probe(result)

        details["database"] = HealthIndicator.from_probe(report.probes[PRIMARY_COMPONENT])

        info = HealthInfo()
        if not report.fallback:
            graphql = report.probes[GRAPHQL_COMPONENT]
            details["hasura"] = HealthIndicator(
                status=graphql.status.value,
                error=graphql.error,
                response_time=report.response_times.get("total"),
            )
            info = HealthInfo(
                versions=[AppMetadataModel.from_metadata(v) for v in report.versions],
                deployment=DeploymentInfo(
                    environment=self._environment,
                    hasura_available=graphql.status is ProbeStatus.UP,
                    last_deployed=next(
                        (v.deployed_at for v in report.versions if v.component == API_COMPONENT),
                        None,
                    ),
                ),
            )

        return HealthCheckResponse(
            status=report.overall_status.value,
            timestamp=report.timestamp.isoformat(),
            environment=self._environment,
            info=info,
            details=details,
        )
