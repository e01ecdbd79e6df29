"""
Map Notes Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and container probes.
How:   Asks the configured TableAccessor whether the sheet can be located.
       That is one lightweight round trip to the backing store.

Status levels:
    - healthy:   sheet reachable (HTTP 200)
    - unhealthy: sheet missing or store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from mapnotes import __version__
from mapnotes.config import settings
from mapnotes.schemas.note import HealthResponse
from mapnotes.services.table_base import TableAccessor
from mapnotes.services.table_provider import get_table

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Backing sheet unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(table: TableAccessor = Depends(get_table)) -> JSONResponse:
    storage = "available"
    detail = None

    try:
        if not await table.sheet_exists():
            storage = "sheet_missing"
            detail = f"{table.sheet_name} not found"
    except Exception as e:
        storage = "unavailable"
        detail = type(e).__name__
        logger.warning("Health check: note store unreachable: %s", str(e))

    healthy = storage == "available"
    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        backend=settings.table_backend,
        sheet=table.sheet_name,
        storage=storage,
        uptime_seconds=round(time.time() - _start_time, 2),
        detail=detail,
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())
