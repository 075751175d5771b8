"""Process-local probes: uptime, resident memory and disk usage."""

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import psutil

from service_layer.core.health import HealthProbeResult


class UptimeProbe:
    """Always up while the process answers; reports how long it has run."""

    name = "uptime"

    def __init__(self, started_at: Optional[datetime] = None) -> None:
        self.started_at = started_at or datetime.now(timezone.utc)

    def check(self) -> HealthProbeResult:
        uptime = datetime.now(timezone.utc) - self.started_at
        return HealthProbeResult.up(
            uptimeInSeconds=int(uptime.total_seconds()),
            startedAt=self.started_at.isoformat(),
        )


class MemoryProbe:
    """Down once the process resident set size crosses the threshold."""

    name = "memory_heap"

    def __init__(self, threshold_bytes: int, process: Optional[psutil.Process] = None) -> None:
        self.threshold_bytes = threshold_bytes
        self._process = process or psutil.Process()

    def check(self) -> HealthProbeResult:
        started = time.perf_counter()
        rss = self._process.memory_info().rss
        elapsed = round((time.perf_counter() - started) * 1000, 1)
        if rss > self.threshold_bytes:
            return HealthProbeResult.down(
                f"Used heap exceeded the set threshold ({rss} > {self.threshold_bytes} bytes)",
                elapsed,
                usedBytes=rss,
                thresholdBytes=self.threshold_bytes,
            )
        return HealthProbeResult.up(elapsed, usedBytes=rss, thresholdBytes=self.threshold_bytes)


class DiskProbe:
    """Down once the used fraction of the volume crosses the threshold."""

    name = "disk"

    def __init__(self, path: Path, threshold_percent: float = 0.9) -> None:
        self.path = path
        self.threshold_percent = threshold_percent

    def check(self) -> HealthProbeResult:
        started = time.perf_counter()
        usage = psutil.disk_usage(str(self.path))
        elapsed = round((time.perf_counter() - started) * 1000, 1)
        used = usage.percent / 100
        if used > self.threshold_percent:
            return HealthProbeResult.down(
                f"Used disk storage exceeded the set threshold ({used:.0%} > {self.threshold_percent:.0%})",
                elapsed,
                usedPercent=usage.percent,
                path=str(self.path),
            )
        return HealthProbeResult.up(elapsed, usedPercent=usage.percent, path=str(self.path))
