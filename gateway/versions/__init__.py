"""Version bookkeeping."""

from gateway.versions.sync import VersionInfo, VersionSyncService

__all__ = ["VersionInfo", "VersionSyncService"]
