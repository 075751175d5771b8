"""Health aggregation across database, GraphQL engine and system probes."""

import asyncio
import logging
import time
from typing import Awaitable, Mapping, Optional, Sequence, TypeVar

from service_layer.core.health import (
    API_COMPONENT,
    GRAPHQL_COMPONENT,
    PRIMARY_COMPONENT,
    AppMetadata,
    CompositeHealthReport,
    DatabaseProbe,
    GraphQLEngine,
    HealthProbeResult,
    ProbeStatus,
    SystemProbe,
    merge_status,
)
from service_layer.core.tasks import DetachedTasks

logger = logging.getLogger(__name__)

T = TypeVar("T")

GRAPHQL_UNREACHABLE = "GraphQL engine unreachable"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


def _describe(exc: BaseException, timeout: float) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return f"timed out after {timeout:g}s"
    return str(exc) or type(exc).__name__


async def _bounded(awaitable: Awaitable[T], timeout: float) -> T:
    return await asyncio.wait_for(awaitable, timeout=timeout)


async def probe_database(database: DatabaseProbe, timeout: float) -> HealthProbeResult:
    """Run the database probe; every failure becomes a down result."""
    started = time.perf_counter()
    try:
        return await _bounded(database.check_connection(), timeout)
    except Exception as e:
        logger.warning("Database probe failed: %s", _describe(e, timeout))
        return HealthProbeResult.down(_describe(e, timeout), _elapsed_ms(started))


async def probe_graphql(graphql: GraphQLEngine, timeout: float) -> HealthProbeResult:
    """Run the GraphQL engine probe; every failure becomes a down result."""
    started = time.perf_counter()
    try:
        available = await _bounded(graphql.test_connection(), timeout)
    except Exception as e:
        logger.warning("GraphQL engine probe failed: %s", _describe(e, timeout))
        return HealthProbeResult.down(_describe(e, timeout), _elapsed_ms(started))
    if not available:
        return HealthProbeResult.down(GRAPHQL_UNREACHABLE, _elapsed_ms(started))
    return HealthProbeResult.up(_elapsed_ms(started))


def probe_system(probe: SystemProbe) -> HealthProbeResult:
    try:
        return probe.check()
    except Exception as e:
        logger.warning("System probe %s failed: %s", probe.name, e)
        return HealthProbeResult.down(str(e) or type(e).__name__)


class HealthAggregator:
    """Compose independent probes into one CompositeHealthReport.

    The database is the primary dependency; the GraphQL engine and the
    system probes are secondary. check_health() never raises on collaborator
    failure. When the GraphQL engine is reachable a snapshot of the report
    is persisted in the background and never awaited.
    """

    def __init__(
        self,
        database: DatabaseProbe,
        graphql: GraphQLEngine,
        *,
        environment: str = "production",
        probe_timeout: float = 3.0,
        system_probes: Optional[Sequence[SystemProbe]] = None,
        tasks: Optional[DetachedTasks] = None,
    ) -> None:
        self._database = database
        self._graphql = graphql
        self._environment = environment
        self._probe_timeout = probe_timeout
        self._system_probes = list(system_probes or [])
        self._tasks = tasks or DetachedTasks()

    @property
    def tasks(self) -> DetachedTasks:
        return self._tasks

    async def check_health(self) -> CompositeHealthReport:
        started = time.perf_counter()

        database, graphql = await asyncio.gather(
            probe_database(self._database, self._probe_timeout),
            probe_graphql(self._graphql, self._probe_timeout),
        )
        probes: dict[str, HealthProbeResult] = {
            PRIMARY_COMPONENT: database,
            GRAPHQL_COMPONENT: graphql,
        }
        for probe in self._system_probes:
            probes[probe.name] = probe_system(probe)

        overall = merge_status(
            database.status,
            [result.status for name, result in probes.items() if name != PRIMARY_COMPONENT],
        )

        versions: list[AppMetadata] = []
        if graphql.is_up:
            versions = await self._fetch_versions()

        report = self._build_report(overall, probes, versions, started)

        if graphql.is_up:
            self._tasks.spawn(
                self._record_snapshot(report.to_snapshot()),
                name="health-snapshot",
            )
        return report

    async def _fetch_versions(self) -> list[AppMetadata]:
        try:
            return list(
                await _bounded(
                    self._graphql.get_metadata(self._environment), self._probe_timeout
                )
            )
        except Exception as e:
            logger.warning("Version metadata unavailable: %s", _describe(e, self._probe_timeout))
            return []

    async def _record_snapshot(self, snapshot: Mapping[str, object]) -> None:
        recorded = await self._graphql.record_snapshot(snapshot)
        if not recorded:
            logger.warning("Health snapshot was not recorded")

    def _build_report(
        self,
        overall: ProbeStatus,
        probes: Mapping[str, HealthProbeResult],
        versions: Sequence[AppMetadata],
        started: float,
    ) -> CompositeHealthReport:
        statuses = {name: result.status for name, result in probes.items()}
        statuses[API_COMPONENT] = ProbeStatus.UP

        response_times = {
            name: result.response_time_ms
            for name, result in probes.items()
            if result.response_time_ms is not None
        }
        response_times["total"] = _elapsed_ms(started)

        errors = {
            name: result.error or "unknown error"
            for name, result in probes.items()
            if result.status is ProbeStatus.DOWN
        }

        return CompositeHealthReport(
            overall_status=overall,
            component_statuses=statuses,
            response_times=response_times,
            errors=errors or None,
            versions=tuple(versions),
            probes=dict(probes),
        )


async def build_fallback_report(
    database: DatabaseProbe, timeout: float = 3.0
) -> CompositeHealthReport:
    """Reduced report from the database probe alone.

    Used when aggregation itself blew up: no versions, no GraphQL entries.
    """
    started = time.perf_counter()
    result = await probe_database(database, timeout)
    overall = ProbeStatus.DOWN if result.status is ProbeStatus.DOWN else ProbeStatus.UP

    response_times = {"total": _elapsed_ms(started)}
    if result.response_time_ms is not None:
        response_times[PRIMARY_COMPONENT] = result.response_time_ms

    return CompositeHealthReport(
        overall_status=overall,
        component_statuses={PRIMARY_COMPONENT: result.status},
        response_times=response_times,
        errors={PRIMARY_COMPONENT: result.error or "unknown error"}
        if result.status is ProbeStatus.DOWN
        else None,
        probes={PRIMARY_COMPONENT: result},
        fallback=True,
    )
