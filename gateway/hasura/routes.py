"""Keep Hasura's tracked tables in step with the database schema."""

import logging
from typing import Any

import asyncpg
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from service_layer.exceptions import ServiceLayerError

from gateway.dependencies import ServiceLayerDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hasura", tags=["hasura"])

LIST_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = 'public'
    AND table_type = 'BASE TABLE'
"""


@router.post("/sync")
async def sync_tables(layer: ServiceLayerDep) -> Any:
    """Track every public table Hasura does not know about yet."""
    if layer is None or not layer.has_postgres:
        return JSONResponse(
            {"success": False, "error": "Database not available"}, status_code=500
        )

    try:
        async with layer.postgres.acquire() as conn:
            rows = await conn.fetch(LIST_TABLES_SQL)
        tracked = await layer.hasura.get_tracked_tables()
    except (ServiceLayerError, asyncpg.PostgresError, OSError) as e:
        logger.exception("Failed to sync Hasura with database")
        return JSONResponse(
            {
                "success": False,
                "error": "Failed to sync Hasura with database",
                "details": str(e),
            },
            status_code=500,
        )

    untracked = [row["table_name"] for row in rows if row["table_name"] not in tracked]
    results = []
    for table in untracked:
        try:
            await layer.hasura.track_table(table)
            results.append({"table": table, "status": "tracked"})
        except ServiceLayerError as e:
            results.append({"table": table, "status": "error", "error": str(e)})

    return {
        "success": True,
        "message": f"Synced {len(untracked)} new tables",
        "results": results,
        "tracked_tables": len(tracked),
        "new_tables": len(untracked),
    }


@router.get("/status")
async def hasura_status(layer: ServiceLayerDep) -> dict[str, Any]:
    if layer is None:
        return {"hasura_available": False, "tracked_tables_count": 0, "tracked_tables": []}

    available = await layer.hasura.test_connection()
    tracked: list[str] = []
    if available:
        try:
            tracked = await layer.hasura.get_tracked_tables()
        except ServiceLayerError as e:
            logger.warning("Could not list tracked tables: %s", e)
    return {
        "hasura_available": available,
        "tracked_tables_count": len(tracked),
        "tracked_tables": tracked,
    }
