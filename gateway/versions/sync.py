"""Record the running build in app_metadata at startup."""

import asyncio
import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from importlib import metadata as importlib_metadata
from typing import Optional

from service_layer.adapters.hasura.client import Hasura
from service_layer.core.health import AppMetadata

logger = logging.getLogger(__name__)

DISTRIBUTION = "hasura-gateway"
FALLBACK_VERSION = "0.1.0"
GIT_TIMEOUT = 1.0


@dataclass(frozen=True)
class VersionInfo:
    component: str
    version: str
    git_commit: str
    deployed_at: str
    environment: str


def _run_git(*args: str) -> Optional[str]:
    try:
        out = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
            check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out.stdout.strip() or None


async def _git(*args: str) -> Optional[str]:
    """Run a git command off the event loop; None on any failure."""
    return await asyncio.to_thread(_run_git, *args)


def package_version() -> str:
    try:
        return importlib_metadata.version(DISTRIBUTION)
    except importlib_metadata.PackageNotFoundError:
        return FALLBACK_VERSION


class VersionSyncService:
    """Upsert this component's version when it differs from the stored one."""

    def __init__(
        self,
        hasura: Hasura,
        environment: str = "development",
        component: str = "api",
        app_version: Optional[str] = None,
        git_commit: Optional[str] = None,
        build_time: Optional[str] = None,
    ) -> None:
        self._hasura = hasura
        self._environment = environment
        self._component = component
        self._app_version = app_version
        self._git_commit = git_commit
        self._build_time = build_time

    async def git_commit(self) -> str:
        # Looked up once per process
        if self._git_commit is None:
            self._git_commit = await _git("rev-parse", "HEAD") or "unknown"
        return self._git_commit

    async def version_string(self) -> str:
        """Clean version in production, suffixed with the short commit elsewhere."""
        if self._environment == "production" and self._app_version:
            return self._app_version
        base = await _git("describe", "--tags", "--abbrev=0") or package_version()
        if self._environment == "production":
            return base
        commit = (await self.git_commit())[:7]
        if self._environment == "staging":
            return f"{base}-staging.{commit}"
        return f"{base}-preview.{commit}"

    async def current_version(self) -> VersionInfo:
        return VersionInfo(
            component=self._component,
            version=await self.version_string(),
            git_commit=await self.git_commit(),
            deployed_at=self._build_time or datetime.now(timezone.utc).isoformat(),
            environment=self._environment,
        )

    async def latest_recorded(self) -> Optional[AppMetadata]:
        versions = await self._hasura.get_metadata(self._environment)
        return next((v for v in versions if v.component == self._component), None)

    @staticmethod
    def should_update(current: VersionInfo, latest: Optional[AppMetadata]) -> bool:
        if latest is None:
            return True
        return current.version != latest.version or current.git_commit != latest.git_commit

    async def sync_version_on_startup(self) -> bool:
        """Returns True when a new row was written. Never raises."""
        try:
            current = await self.current_version()
            latest = await self.latest_recorded()
            if not self.should_update(current, latest):
                logger.info("Version unchanged: %s@%s", current.component, current.version)
                return False
            updated = await self._hasura.update_app_metadata(
                current.component,
                current.version,
                current.environment,
                git_commit=current.git_commit,
                metadata={"deployed_at": current.deployed_at},
            )
        except Exception:
            logger.exception("Version sync failed (non-critical)")
            return False
        if updated:
            logger.info(
                "Version synced: %s@%s (%s)",
                current.component,
                current.version,
                current.git_commit[:7],
            )
        return updated
