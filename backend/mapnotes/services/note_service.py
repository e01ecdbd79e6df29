"""
Map Notes Backend — Note Service (Read & Write Handlers)
==========================================================

What:  The two note operations: list every note, add one note.
Why:   Keeps the sheet rules (header skip, blank-row skip, required fields,
       server timestamps, header bootstrap) out of the HTTP layer.
How:   Each call receives the TableAccessor for the current request, does one
       read or one validated append, and returns NoteRecord data or raises a
       MapNotesError. The routes turn both outcomes into JSON envelopes.

Write flow (POST):
    ┌────────────┐   ┌────────────┐   ┌────────────┐   ┌──────────────────┐
    │ Sheet      │──▶│ Parse body │──▶│ Validate   │──▶│ Header if empty, │
    │ exists?    │   │ (JSON)     │   │ 3 fields   │   │ then append row  │
    └────────────┘   └────────────┘   └────────────┘   └──────────────────┘

Read and write detect the header differently: read looks at the first cell,
write only looks at whether the sheet is empty. A sheet whose first row is
data therefore never gets a header row.
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from mapnotes.exceptions import SheetNotFoundError, ValidationError
from mapnotes.schemas.note import NoteRecord, NoteSubmission
from mapnotes.services.table_base import HEADER_ROW, TableAccessor

logger = logging.getLogger(__name__)

HEADER_LABELS = {"Address", "address"}


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    ISO 8601 UTC timestamp with millisecond precision and a Z suffix,
    e.g. 2024-01-15T12:00:00.000Z (the format browsers produce).
    """
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _cell(row: Sequence[Optional[str]], index: int) -> str:
    if index < len(row) and row[index]:
        return str(row[index])
    return ""


def is_header_row(row: Sequence[Optional[str]]) -> bool:
    return _cell(row, 0) in HEADER_LABELS


def row_to_note(row: Sequence[Optional[str]]) -> Optional[NoteRecord]:
    """Map a sheet row to a NoteRecord; None for a row with no address, name or note."""
    address, name, note, timestamp = (_cell(row, i) for i in range(4))
    if not (address or name or note):
        return None
    return NoteRecord(address=address, name=name, note=note, timestamp=timestamp)


def parse_submission(body: Union[str, bytes]) -> NoteSubmission:
    """
    Parse a raw request body into a NoteSubmission.

    Any JSON value other than an object carries none of the three fields, so
    it becomes an empty submission and fails the required-field check. JSON
    null has no fields to read at all and is rejected outright.
    """
    payload = json.loads(body)
    if payload is None:
        raise TypeError("Request body is null")
    if not isinstance(payload, dict):
        return NoteSubmission()
    return NoteSubmission.model_validate(payload)


class NoteService:
    """
    Stateless note handlers.

    Error Handling Strategy:
        SheetNotFoundError and ValidationError are raised for the expected
        failures; StorageError comes up from the accessor; anything else
        (for example a malformed body) propagates unchanged. Nothing here
        retries, and nothing is appended unless validation passed.
    """

    async def list_notes(self, table: TableAccessor) -> List[NoteRecord]:
        """
        Return every note in sheet order.

        A first row whose first cell is "Address"/"address" is treated as the
        header and skipped. Rows with empty address, name and note are skipped.
        Missing cells are returned as "".

        Raises:
            SheetNotFoundError: The sheet does not exist
            StorageError: The backing store failed
        """
        rows = await table.read_rows()

        start = 1 if rows and is_header_row(rows[0]) else 0

        notes = []
        for row in rows[start:]:
            record = row_to_note(row)
            if record is not None:
                notes.append(record)

        logger.info("Listed %d notes from %s (%d rows)", len(notes), table.sheet_name, len(rows))
        return notes

    async def add_note(self, table: TableAccessor, body: Union[str, bytes]) -> NoteRecord:
        """
        Validate a submission and append it as one row.

        Args:
            table: Accessor for the current request
            body: Raw request body, parsed as JSON

        Returns:
            The stored note, including the generated timestamp

        Raises:
            SheetNotFoundError: The sheet does not exist (checked first)
            json.JSONDecodeError: Body is not valid JSON
            TypeError: Body is JSON null
            ValidationError: address, name or note is empty
            StorageError: The backing store failed
        """
        if not await table.sheet_exists():
            raise SheetNotFoundError(table.sheet_name)

        submission = parse_submission(body)

        missing = submission.missing_fields()
        if missing:
            logger.info("Rejected note submission, missing: %s", ", ".join(missing))
            raise ValidationError(missing=missing)

        # Always generated here; a timestamp in the body was already dropped.
        timestamp = utc_timestamp()

        if await table.row_count() == 0:
            await table.append_row(HEADER_ROW)
            logger.info("Wrote header row to empty sheet %s", table.sheet_name)

        record = NoteRecord(
            address=submission.address,
            name=submission.name,
            note=submission.note,
            timestamp=timestamp,
        )
        await table.append_row([record.address, record.name, record.note, record.timestamp])

        logger.info("Note added to %s at %s", table.sheet_name, timestamp)
        return record


note_service = NoteService()
