"""
Map Notes Backend — Request Logging Middleware
================================================

What:  One access log line per request on the "mapnotes.access" logger.
How:   Measures wall time around the downstream call and logs method, path,
       status, duration, request ID and client IP. Level follows the status
       class (5xx ERROR, 4xx WARNING, otherwise INFO).

Note that note failures are HTTP 200 with "success": false, so they show up
as INFO here; the handler logs its own WARNING/ERROR line for them.

Not logged: request bodies (addresses and author names), response bodies.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mapnotes.middleware.request_id import request_id_var

logger = logging.getLogger("mapnotes.access")

SKIPPED_PATHS = {"/health"}


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request ID correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        client_ip = client_address(request)
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
