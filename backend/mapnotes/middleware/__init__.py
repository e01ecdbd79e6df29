# Middleware package init
"""
Map Notes Backend — Middleware Package
========================================

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    Rate limiting runs first so rejected requests cost nothing downstream.
    The request ID is set before the access log line is written, so both
    carry the same correlation ID.
"""
