"""
YourTales Backend - Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports whether OTP email
       delivery is configured.

Status levels:
    healthy:   database reachable, SMTP configured            (HTTP 200)
    degraded:  database reachable, OTP codes only logged       (HTTP 200)
    unhealthy: database unreachable                            (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from yourtales import __version__
from yourtales.config import settings
from yourtales.database import engine
from yourtales.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Set once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
    description=(
        "Returns the health status of the backend and its dependencies. "
        "Used by container health checks and load balancers."
    ),
)
async def health_check():
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    email_status = "configured" if settings.smtp_configured else "disabled"
    if email_status == "disabled" and overall == "healthy":
        overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        email=email_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump(by_alias=True))
    return body
