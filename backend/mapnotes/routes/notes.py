"""
Map Notes Backend — Notes Route Handlers
==========================================

What:  GET lists notes, POST adds a note, on /api/notes and on /exec.
Why:   /exec keeps clients working that were built against a single web-app
       URL where the HTTP method alone selects the operation.
How:   Each route calls NoteService inside one try block and converts the
       outcome into a JSON envelope. Nothing escapes as a transport error:
       every response is HTTP 200 with Content-Type application/json, and
       "success" tells the client what happened.

Envelope mapping:
    list ok                → {"success": true, "notes": [...]}
    add ok                 → {"success": true, "message": ..., "note": {...}}
    SheetNotFoundError     → {"error": "Sheet1 not found"} on GET,
                             {"success": false, "error": ...} on POST
    ValidationError        → {"success": false, "error": <fixed message>}
    anything else          → {"success": false, "error": "<Type>: <message>"}
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from mapnotes.config import settings
from mapnotes import exceptions
from mapnotes.exceptions import MapNotesError, SheetNotFoundError, ValidationError
from mapnotes.middleware.request_id import request_id_var
from mapnotes.schemas.note import (
    FailureResponse,
    NoteAddedResponse,
    NoteListResponse,
    SheetMissingResponse,
)
from mapnotes.services.note_service import note_service
from mapnotes.services.table_base import TableAccessor
from mapnotes.services.table_provider import get_table

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

_APP_ERROR_NAMES = {
    name for name, obj in vars(exceptions).items()
    if isinstance(obj, type) and issubclass(obj, MapNotesError)
}

_LIST_RESPONSES = {
    200: {
        "description": "Notes in sheet order, or an error envelope",
        "model": NoteListResponse,
    },
}

_ADD_RESPONSES = {
    200: {
        "description": "The stored note, or an error envelope",
        "model": NoteAddedResponse,
    },
}


def _envelope(model) -> JSONResponse:
    return JSONResponse(status_code=200, content=model.model_dump())


def describe_error(exc: Exception) -> str:
    """
    Stringify an unexpected error as "<ExceptionType>: <message>".

    Only the first line of the message is kept. A third-party exception
    named like one of ours (pydantic's ValidationError) is qualified with
    its top-level package so clients can tell the two apart.
    """
    lines = str(exc).strip().splitlines()
    message = lines[0] if lines else ""
    name = type(exc).__name__
    if name in _APP_ERROR_NAMES and not isinstance(exc, MapNotesError):
        name = f"{type(exc).__module__.split('.')[0]}.{name}"
    return f"{name}: {message}" if message else name


def _unexpected(operation: str, exc: Exception) -> JSONResponse:
    rid = request_id_var.get("")
    logger.error("[%s] Unexpected error in %s: %s", rid, operation, str(exc), exc_info=True)
    return _envelope(FailureResponse(error=describe_error(exc)))


@router.get(
    "/api/notes",
    response_model=NoteListResponse,
    responses=_LIST_RESPONSES,
    summary="List all notes",
    description=(
        "Returns every note in the order it was added. A header row and blank "
        "rows in the sheet are skipped."
    ),
)
@router.get("/exec", include_in_schema=False)
async def list_notes(table: TableAccessor = Depends(get_table)) -> JSONResponse:
    """Read handler: snapshot of the sheet as notes."""
    try:
        notes = await note_service.list_notes(table)
        return _envelope(NoteListResponse(notes=notes))

    except SheetNotFoundError as e:
        logger.warning("[%s] List failed: %s", request_id_var.get(""), e.message)
        if settings.unify_error_shape:
            return _envelope(FailureResponse(error=e.message))
        return _envelope(SheetMissingResponse(error=e.message))

    except Exception as e:
        return _unexpected("list_notes", e)


@router.post(
    "/api/notes",
    response_model=NoteAddedResponse,
    responses=_ADD_RESPONSES,
    summary="Add a note",
    description=(
        'Body: {"address": ..., "name": ..., "note": ...}, all three required. '
        "The timestamp is generated by the server; any other field is ignored. "
        "The body is parsed as JSON whatever Content-Type the client sends."
    ),
)
@router.post("/exec", include_in_schema=False)
async def add_note(request: Request, table: TableAccessor = Depends(get_table)) -> JSONResponse:
    """Write handler: validate and append one note."""
    try:
        body = await request.body()
        note = await note_service.add_note(table, body)
        return _envelope(NoteAddedResponse(note=note))

    except (SheetNotFoundError, ValidationError) as e:
        logger.warning("[%s] Add failed: %s", request_id_var.get(""), e.message)
        return _envelope(FailureResponse(error=e.message))

    except Exception as e:
        return _unexpected("add_note", e)
