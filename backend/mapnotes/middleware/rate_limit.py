"""
Map Notes Backend — Rate Limiting Middleware
==============================================

What:  Per-client sliding window rate limiter.
Why:   The notes endpoint is public; a single client should not be able to
       flood the sheet with rows or hammer the backing store.
How:   Keeps the request timestamps of each client in memory. On each
       request, timestamps older than the window are dropped; if the client
       still has RATE_LIMIT_REQUESTS entries, the request is rejected with
       429 and a Retry-After header.

Client key:
    The socket peer address, or the first X-Forwarded-For hop when
    TRUST_FORWARDED_FOR is enabled (only behind a proxy that sets it).
    Deployed behind a reverse proxy without it, every user shares the
    proxy's address and one bucket; the first such request logs a warning.

Limits:
    State is per process. With several workers each one enforces the limit
    separately.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from mapnotes.config import settings
from mapnotes.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Sweep idle clients once this many requests have been seen since the last sweep.
CLEANUP_INTERVAL = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory sliding window rate limiter, configured from settings."""

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._since_cleanup = 0
        self._warned_untrusted_proxy = False

    def client_key(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if settings.trust_forwarded_for:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
        elif forwarded and not self._warned_untrusted_proxy:
            self._warned_untrusted_proxy = True
            logger.warning(
                "Request arrived with X-Forwarded-For but TRUST_FORWARDED_FOR is off: "
                "clients behind that proxy share one rate limit bucket"
            )
        return request.client.host if request.client else "unknown"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not settings.rate_limit_enabled or request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client = self.client_key(request)
        now = time.time()
        window = settings.rate_limit_window
        window_start = now - window

        timestamps = self._requests[client]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + window - now) + 1
            error = RateLimitExceededError(retry_after=retry_after, context={"client": client})
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds window",
                client,
                len(timestamps),
                window,
            )
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": error.message},
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        self._since_cleanup += 1
        if self._since_cleanup >= CLEANUP_INTERVAL:
            self._cleanup_inactive_clients(window_start)
            self._since_cleanup = 0

        return await call_next(request)

    def _cleanup_inactive_clients(self, window_start: float) -> None:
        """Drop clients with no request inside the current window."""
        inactive = [
            client for client, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for client in inactive:
            del self._requests[client]

        if inactive:
            logger.debug("Cleaned up %d inactive rate limit entries", len(inactive))
