"""
Snippet Manager Backend — Health Check Route
==============================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings MongoDB and reports the server lifecycle state.
Who:   Called by container health checks, load balancers and monitoring.

Status levels:
    - healthy:   MongoDB answers a ping (HTTP 200)
    - unhealthy: MongoDB unreachable or storage not open (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from snippet_manager import __version__
from snippet_manager.schemas.snippet import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "MongoDB unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    """
    Probe MongoDB with a lightweight `ping` command.

    Returns:
        HealthResponse with the database status, lifecycle state and uptime.
    """
    storage = getattr(request.app.state, "storage", None)
    lifecycle = getattr(request.app.state, "lifecycle", None)

    db_ok = storage is not None and await storage.ping()
    if not db_ok:
        logger.warning("Health check: MongoDB unreachable")

    body = HealthResponse(
        status="healthy" if db_ok else "unhealthy",
        version=__version__,
        database="connected" if db_ok else "disconnected",
        lifecycle=lifecycle.value if lifecycle is not None else "unknown",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not db_ok:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
