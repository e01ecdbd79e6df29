"""
Map Notes Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the failure cases of the two
       note operations.
How:   Each exception carries a message (safe to return to the client) and an
       optional context dict (logged, never returned).
Who:   Raised by NoteService, the table accessors and middleware; converted to
       JSON envelopes by the notes routes (mapnotes/routes/notes.py).

Exception Hierarchy:
    MapNotesError (base)
    ├── ValidationError          → {"success": false, "error": message}
    ├── SheetNotFoundError       → {"error": "<sheet> not found"} on read,
    │                              {"success": false, ...} on write
    ├── StorageError             → backing store fault (driver / OS error)
    └── RateLimitExceededError   → HTTP 429 from RateLimitMiddleware

None of these are retried: every failure is reported in the response to the
request that caused it.
"""

from typing import Any, Dict, Optional


class MapNotesError(Exception):
    """
    Base exception for all Map Notes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MapNotesError):
    """
    Raised when a submitted note is missing required fields.

    The message is part of the public contract: the map front-end shows it
    as-is, so the default wording must not change.
    """

    def __init__(
        self,
        message: str = "Missing required fields: address, name, and note are required",
        missing: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if missing:
            ctx["missing"] = missing
        super().__init__(message=message, context=ctx)
        self.missing = missing or []


class SheetNotFoundError(MapNotesError):
    """
    Raised when the named sheet cannot be located in the backing store.

    Message format is "<sheet> not found", i.e. "Sheet1 not found" with the
    default configuration.
    """

    def __init__(self, sheet_name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["sheet"] = sheet_name
        super().__init__(message=f"{sheet_name} not found", context=ctx)
        self.sheet_name = sheet_name


class StorageError(MapNotesError):
    """
    Raised when the backing store fails (connection lost, disk error, ...).

    Accessors wrap driver and OS exceptions in this type so the handlers see
    one failure class regardless of backend. The original exception is kept
    as __cause__ and its type name in context.
    """

    def __init__(
        self,
        message: str = "The note store is unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(MapNotesError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP 429 with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
