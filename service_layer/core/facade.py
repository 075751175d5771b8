"""ServiceLayer façade - lifecycle + access to every collaborator."""

import logging
from datetime import datetime, timezone
from types import TracebackType
from typing import Optional, Self

import asyncpg

from service_layer.adapters.hasura.client import Hasura, UnavailableHasura, build_hasura_client
from service_layer.adapters.postgres.probe import PostgresProbe, UnavailableDatabase, create_pool
from service_layer.adapters.system.probes import DiskProbe, MemoryProbe, UptimeProbe
from service_layer.config import ServiceLayerConfig
from service_layer.core.aggregator import HealthAggregator
from service_layer.core.events import InProcessEventBus
from service_layer.core.health import CompositeHealthReport, DatabaseProbe
from service_layer.core.tasks import DetachedTasks
from service_layer.exceptions import NotStartedError

logger = logging.getLogger(__name__)


class ServiceLayer:
    """Unified façade - lifecycle + access to the pool, Hasura and the bus.

    Collaborators are resolved once in start(): a pool that cannot be
    created becomes an UnavailableDatabase, missing Hasura settings become
    an UnavailableHasura. Nothing downstream re-checks for None.
    """

    def __init__(self, config: ServiceLayerConfig) -> None:
        self._config = config
        self._postgres: Optional[asyncpg.Pool] = None
        self._database: DatabaseProbe = UnavailableDatabase()
        self._hasura: Hasura = UnavailableHasura()
        self._events = InProcessEventBus()
        self._tasks = DetachedTasks()
        self._aggregator: Optional[HealthAggregator] = None
        self.started_at = datetime.now(timezone.utc)

    @property
    def config(self) -> ServiceLayerConfig:
        return self._config

    @property
    def postgres(self) -> asyncpg.Pool:
        """Native asyncpg pool."""
        if self._postgres is None:
            raise NotStartedError("Postgres pool")
        return self._postgres

    @property
    def has_postgres(self) -> bool:
        return self._postgres is not None

    @property
    def database(self) -> DatabaseProbe:
        return self._database

    @property
    def hasura(self) -> Hasura:
        return self._hasura

    @property
    def events(self) -> InProcessEventBus:
        """Event bus for pub/sub."""
        return self._events

    @property
    def tasks(self) -> DetachedTasks:
        return self._tasks

    @property
    def aggregator(self) -> HealthAggregator:
        if self._aggregator is None:
            raise NotStartedError("Health aggregator")
        return self._aggregator

    async def _connect_postgres(self) -> None:
        cfg = self._config.postgres
        try:
            self._postgres = await create_pool(
                cfg.dsn,
                min_size=cfg.min_connections,
                max_size=cfg.max_connections,
                command_timeout=cfg.command_timeout,
            )
        except Exception as e:
            logger.error("Could not create Postgres pool: %s", e)
            self._database = UnavailableDatabase(f"not connected: {e}")
            return
        self._database = PostgresProbe(self._postgres, timeout=self._config.probe_timeout)

    async def _connect_hasura(self) -> None:
        self._hasura = build_hasura_client(self._config.hasura)

    async def _disconnect_postgres(self) -> None:
        if self._postgres:
            await self._postgres.close()
            self._postgres = None
            self._database = UnavailableDatabase()

    async def _disconnect_hasura(self) -> None:
        await self._hasura.aclose()
        self._hasura = UnavailableHasura()

    def _build_aggregator(self) -> HealthAggregator:
        system = self._config.system
        return HealthAggregator(
            self._database,
            self._hasura,
            environment=self._config.environment,
            probe_timeout=self._config.probe_timeout,
            system_probes=[
                UptimeProbe(self.started_at),
                MemoryProbe(system.memory_threshold_bytes),
                DiskProbe(system.disk_path, system.disk_threshold_percent),
            ],
            tasks=self._tasks,
        )

    async def start(self) -> None:
        """Connect all collaborators."""
        await self._connect_postgres()
        await self._connect_hasura()
        self._aggregator = self._build_aggregator()

    async def stop(self) -> None:
        """Graceful shutdown."""
        await self._tasks.drain(timeout=self._config.probe_timeout)
        await self._disconnect_hasura()
        await self._disconnect_postgres()
        self._aggregator = None

    async def health(self) -> CompositeHealthReport:
        """Aggregate health check across all collaborators."""
        return await self.aggregator.check_health()

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.stop()
