"""
TripFolders Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   Load balancers and container runtimes need to know whether this
       instance can serve pages, which for this app means reaching the
       database.
How:   Runs SELECT 1 against the engine and reports the result.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tripfolders import __version__
from tripfolders.database import engine
from tripfolders.schemas.folder import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Set once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health of the service and its database connection.",
)
async def health_check():
    """
    Probe the database with SELECT 1.

    Returns:
        HealthResponse, with HTTP 503 when the database is unreachable.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
