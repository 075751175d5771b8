"""FastAPI routes for health checks."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from gateway.dependencies import HealthReporterDep

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check(reporter: HealthReporterDep) -> JSONResponse:
    """Composite health report. 503 only when the database is down."""
    response = await reporter.check()
    status_code = 503 if response.status == "down" else 200
    return JSONResponse(response.to_json(), status_code=status_code)
