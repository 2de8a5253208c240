"""
Snippetbox — Health Check Route
=================================

What:  GET /health for monitoring and load balancer probes.
How:   Runs `SELECT 1` against the engine on app.state and reports the result
       with the version and uptime.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from snippetbox import __version__
from snippetbox.database import ping
from snippetbox.schemas.snippet import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(request: Request):
    db_status = "connected"
    status_code = 200

    try:
        await ping(request.app.state.engine)
    except (SQLAlchemyError, OSError) as e:
        logger.error("Health check: database unreachable: %s", e)
        db_status = "unreachable"
        status_code = 503

    body = HealthResponse(
        status="healthy" if status_code == 200 else "unhealthy",
        database=db_status,
        version=__version__,
        uptime_seconds=round(time.monotonic() - request.app.state.started_at, 1),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())
