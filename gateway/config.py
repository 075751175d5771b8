"""Gateway configuration."""

import os
from dataclasses import dataclass, field
from typing import Optional


def _default_origins() -> list[str]:
    return ["http://localhost:3000"]


@dataclass
class GatewayConfig:
    """Configuration for the web application."""

    title: str = "Hasura Gateway"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=_default_origins)
    version_sync: bool = True
    app_version: Optional[str] = None
    git_commit: Optional[str] = None
    build_time: Optional[str] = None

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        origins = _default_origins()
        web_url = os.environ.get("WEB_URL")
        if web_url:
            origins.append(web_url)
        return cls(
            port=int(os.environ.get("PORT", "4000")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            cors_origins=origins,
            app_version=os.environ.get("APP_VERSION") or None,
            git_commit=os.environ.get("GIT_COMMIT") or None,
            build_time=os.environ.get("BUILD_TIME") or None,
        )
