"""
Map Notes Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract with the map front-end.
Why:   The front-end was written against a fixed JSON shape; these models pin
       that shape down and generate the OpenAPI docs.
How:   Routes serialize these with model_dump(); the submission model validates
       the JSON object decoded from the raw request body.

Response envelopes (all HTTP 200):
    list ok:        {"success": true, "notes": [...]}
    add ok:         {"success": true, "message": "...", "note": {...}}
    failure:        {"success": false, "error": "..."}
    sheet missing:  {"error": "Sheet1 not found"}   (read path only)
"""

import json
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Note Models
# ══════════════════════════════════════════════════════════════════════════


class NoteRecord(BaseModel):
    """
    One note as stored in the sheet and returned to clients.

    Every field is a string; missing cells in legacy rows are returned as ""
    and never as null.
    """
    address: str = Field(default="", description="Location the note is attached to")
    name: str = Field(default="", description="Author's display name")
    note: str = Field(default="", description="Free-form annotation text")
    timestamp: str = Field(default="", description="Server-generated ISO 8601 time of writing")


class NoteSubmission(BaseModel):
    """
    What:  Body of an add request.
    How:   Absent or falsy values become "" (the validation step then rejects
           them). Any other non-string value is stored as its JSON text:
           true → "true", 42 → "42", {"a": 1} → '{"a":1}'. Unknown keys,
           including a client-supplied "timestamp", are ignored.
    """
    address: str = ""
    name: str = ""
    note: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("address", "name", "note", mode="before")
    @classmethod
    def default_to_text(cls, v: Any) -> str:
        if not v:
            return ""
        if isinstance(v, str):
            return v
        if isinstance(v, float) and v.is_integer():
            # JSON has one number type: 3.0 is written back as 3
            v = int(v)
        return json.dumps(v, separators=(",", ":"), ensure_ascii=False)

    def missing_fields(self) -> List[str]:
        return [field for field in ("address", "name", "note") if not getattr(self, field)]


# ══════════════════════════════════════════════════════════════════════════
# Response Envelopes
# ══════════════════════════════════════════════════════════════════════════


class NoteListResponse(BaseModel):
    """Returned by the list operation."""
    success: Literal[True] = True
    notes: List[NoteRecord] = Field(description="All notes in sheet row order")


class NoteAddedResponse(BaseModel):
    """Returned by the add operation; echoes the stored note."""
    success: Literal[True] = True
    message: str = Field(default="Note added successfully")
    note: NoteRecord


class FailureResponse(BaseModel):
    """
    Failure envelope shared by both operations.

    error is either a fixed message (validation, missing sheet on write) or
    "<ExceptionType>: <message>" for unexpected errors.
    """
    success: Literal[False] = False
    error: str


class SheetMissingResponse(BaseModel):
    """
    Read-path answer when the sheet does not exist.

    Deliberately has no "success" key; see Settings.unify_error_shape.
    """
    error: str


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and backing sheet status.
    Who:   Returned by GET /health for monitoring and container health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    backend: str = Field(description="Configured table backend: database, csv, memory")
    sheet: str = Field(description="Name of the backing sheet")
    storage: str = Field(description="Sheet status: available, sheet_missing, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
    detail: Optional[str] = Field(default=None, description="Reason when storage is not available")
