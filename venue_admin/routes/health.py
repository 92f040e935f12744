"""
Venue Admin — Health Check Route
==================================

What:  Liveness probe for load balancers and container health checks.
How:   Runs `SELECT 1` against the database and checks that the
       storage root (venue images) and the report directory accept writes.

Status levels:
    healthy:   database reachable, both directories writable (200)
    degraded:  database reachable, a directory is not writable (200);
               image uploads or report downloads will fail
    unhealthy: database unreachable (503)
"""

import logging
import os
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from venue_admin import __version__
from venue_admin.config import settings
from venue_admin.database import engine
from venue_admin.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _writable(directory: str) -> bool:
    return os.path.isdir(directory) and os.access(directory, os.W_OK)


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    db_status = "connected"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    storage_status = "writable"
    if not (_writable(settings.storage_root) and _writable(settings.report_dir)):
        storage_status = "unwritable"
        logger.warning(
            "Health check: %s or %s is not writable", settings.storage_root, settings.report_dir
        )

    if db_status != "connected":
        overall = "unhealthy"
    elif storage_status != "writable":
        overall = "degraded"
    else:
        overall = "healthy"

    health = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
