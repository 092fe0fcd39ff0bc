"""
Bookstore Backend — Health Check Route
========================================

What:  GET /health-check for container health checks and load balancers.
How:   Runs SELECT 1 through a request session.

Status:
    200  database reachable   {"success": true,  "database": "connected"}
    503  database unreachable {"success": false, "database": "disconnected"}
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore import __version__
from bookstore.database import get_db_session
from bookstore.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health-check",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(db: AsyncSession = Depends(get_db_session)):
    database = "connected"
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        database = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))
        await db.rollback()

    healthy = database == "connected"
    body = HealthResponse(
        success=healthy,
        message="Server is running" if healthy else "Database unavailable",
        date=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        database=database,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if healthy:
        return body
    return JSONResponse(status_code=503, content=body.model_dump())
