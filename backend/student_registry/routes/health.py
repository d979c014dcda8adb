"""
Student Registry Backend: Health Check Route
==============================================

What:  Health check endpoint for monitoring and container health checks.
How:   Runs SELECT 1 against the store and reports uptime.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from student_registry import __version__
from student_registry.database import Database, get_database
from student_registry.schemas.student import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    database: Database = Depends(get_database),
) -> HealthResponse:
    if await database.ping():
        db_status, overall = "connected", "healthy"
    else:
        db_status, overall = "disconnected", "unhealthy"
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
