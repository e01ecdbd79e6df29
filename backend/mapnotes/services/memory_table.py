"""
Map Notes Backend — In-Memory Table Accessor
==============================================

What:  Sheet rows kept in a Python list inside the server process.
When:  TABLE_BACKEND=memory for local front-end work, and in tests.
Note:  Rows are lost on restart and not shared between worker processes.
"""

import logging
from typing import List, Optional, Sequence

from mapnotes.exceptions import SheetNotFoundError
from mapnotes.services.table_base import Row, TableAccessor, is_blank_row

logger = logging.getLogger(__name__)


class MemoryTableAccessor(TableAccessor):
    """
    List-backed sheet.

    Args:
        sheet_name: Name reported in "<sheet> not found" errors
        rows: Initial rows (copied)
        exists: False models a workbook without this sheet
    """

    backend_name = "memory"

    def __init__(
        self,
        sheet_name: str,
        rows: Optional[List[Sequence[Optional[str]]]] = None,
        exists: bool = True,
    ):
        super().__init__(sheet_name)
        self.rows: List[Row] = [list(r) for r in (rows or [])]
        self.exists = exists

    def _require_sheet(self) -> None:
        if not self.exists:
            raise SheetNotFoundError(self.sheet_name)

    async def sheet_exists(self) -> bool:
        return self.exists

    async def read_rows(self) -> List[Row]:
        self._require_sheet()
        return [list(r) for r in self.rows]

    async def row_count(self) -> int:
        self._require_sheet()
        count = len(self.rows)
        while count and is_blank_row(self.rows[count - 1]):
            count -= 1
        return count

    async def append_row(self, row: Sequence[str]) -> None:
        self._require_sheet()
        self.rows.append(list(row))
        logger.debug("Appended row %d to in-memory sheet %s", len(self.rows), self.sheet_name)
