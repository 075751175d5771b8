"""Pydantic models for the /api/health response."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from service_layer.core.health import AppMetadata, HealthProbeResult


class HealthIndicator(BaseModel):
    """One entry of the details block; extra keys pass through."""

    model_config = ConfigDict(extra="allow")

    status: str
    error: Optional[str] = None

    @classmethod
    def from_probe(cls, result: HealthProbeResult, **extra: Any) -> "HealthIndicator":
        fields: dict[str, Any] = dict(result.details)
        if result.response_time_ms is not None:
            fields["responseTime"] = result.response_time_ms
        if result.timestamp is not None:
            fields["timestamp"] = result.timestamp.isoformat()
        fields.update(extra)
        return cls(status=result.status.value, error=result.error, **fields)


class AppMetadataModel(BaseModel):
    component: str
    version: str
    deployed_at: str
    git_commit: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    @classmethod
    def from_metadata(cls, item: AppMetadata) -> "AppMetadataModel":
        return cls(**item.to_dict())


class DeploymentInfo(BaseModel):
    environment: str
    hasura_available: bool
    last_deployed: Optional[str] = None


class HealthInfo(BaseModel):
    versions: Optional[list[AppMetadataModel]] = None
    deployment: Optional[DeploymentInfo] = None


class HealthCheckResponse(BaseModel):
    """Canonical health response shape."""

    status: str
    timestamp: str
    environment: Optional[str] = None
    info: HealthInfo = Field(default_factory=HealthInfo)
    details: dict[str, HealthIndicator] = Field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
