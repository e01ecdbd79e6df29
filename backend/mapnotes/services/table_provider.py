"""
Map Notes Backend — Table Accessor Provider
=============================================

What:  FastAPI dependency that hands each request the configured TableAccessor.
How:   TABLE_BACKEND decides the implementation:
       - database: new AsyncSession per request, rolled back on error, always closed
       - csv:      a CsvTableAccessor for the configured workbook directory
       - memory:   one shared MemoryTableAccessor for the whole process

Tests replace this dependency through app.dependency_overrides[get_table].
"""

import logging
from typing import AsyncGenerator, Optional

from mapnotes.config import settings
from mapnotes.database import async_session_factory
from mapnotes.services.csv_table import CsvTableAccessor
from mapnotes.services.database_table import DatabaseTableAccessor
from mapnotes.services.memory_table import MemoryTableAccessor
from mapnotes.services.table_base import TableAccessor

logger = logging.getLogger(__name__)

_memory_table: Optional[MemoryTableAccessor] = None


def get_memory_table() -> MemoryTableAccessor:
    """Process-wide in-memory sheet, created on first use."""
    global _memory_table
    if _memory_table is None:
        _memory_table = MemoryTableAccessor(settings.sheet_name)
        logger.warning("Using in-memory sheet %s: notes are lost on restart", settings.sheet_name)
    return _memory_table


async def get_table() -> AsyncGenerator[TableAccessor, None]:
    """
    Yield the TableAccessor for the current request.

    The database session is never held beyond the request, matching the
    "one self-contained transaction per call" model of the handlers.
    """
    if settings.table_backend == "csv":
        yield CsvTableAccessor(settings.sheet_name)
        return

    if settings.table_backend == "memory":
        yield get_memory_table()
        return

    async with async_session_factory() as session:
        try:
            yield DatabaseTableAccessor(session, settings.sheet_name)
        except Exception:
            await session.rollback()
            raise
