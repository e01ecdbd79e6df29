"""
Map Notes Backend — CSV Workbook Table Accessor
=================================================

What:  Stores each sheet as a CSV file inside a workbook directory.
Why:   Lets the map run without a database server, and the sheet can be
       opened directly in any spreadsheet program.
How:   Sheet "Sheet1" is <CSV_WORKBOOK_DIR>/Sheet1.csv. A missing file means
       the sheet does not exist (it is never created implicitly). Reads and
       appends go through aiofiles so disk I/O does not block the event loop.

Layout:
    workbook/
    └── Sheet1.csv
        Address,Name,Note,Timestamp
        123 Main St,Alice,Nice porch,2024-01-15T12:00:00.000Z
"""

import csv
import io
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import aiofiles
import aiofiles.os

from mapnotes.config import settings
from mapnotes.exceptions import SheetNotFoundError, StorageError
from mapnotes.services.table_base import Row, TableAccessor, is_blank_row

logger = logging.getLogger(__name__)


class CsvTableAccessor(TableAccessor):
    """
    One CSV file per sheet.

    Appends open the file in append mode and write a single encoded line, so
    an append never rewrites existing rows.
    """

    backend_name = "csv"

    def __init__(self, sheet_name: str, workbook_dir: Optional[str] = None):
        super().__init__(sheet_name)
        self.workbook_dir = Path(workbook_dir or settings.csv_workbook_dir).resolve()
        self.path = self.workbook_dir / f"{sheet_name}.csv"

    async def sheet_exists(self) -> bool:
        return await aiofiles.os.path.isfile(self.path)

    async def _require_sheet(self) -> None:
        if not await aiofiles.os.path.isfile(self.path):
            raise SheetNotFoundError(self.sheet_name, context={"path": str(self.path)})

    async def read_rows(self) -> List[Row]:
        await self._require_sheet()
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8", newline="") as f:
                content = await f.read()
        except OSError as e:
            logger.error("Failed to read sheet file %s: %s", self.path, str(e))
            raise StorageError(
                message=f"Could not read {self.sheet_name}",
                context={"path": str(self.path), "os_error": str(e)},
            ) from e

        return [list(row) for row in csv.reader(io.StringIO(content))]

    async def row_count(self) -> int:
        rows = await self.read_rows()
        count = len(rows)
        while count and is_blank_row(rows[count - 1]):
            count -= 1
        return count

    async def append_row(self, row: Sequence[str]) -> None:
        await self._require_sheet()

        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="\n").writerow(row)
        line = buffer.getvalue()

        try:
            # A file edited by hand may not end with a newline; the new row
            # must still start on its own line.
            prefix = "" if await self._ends_with_newline() else "\n"
            async with aiofiles.open(self.path, "a", encoding="utf-8", newline="") as f:
                await f.write(prefix + line)
        except OSError as e:
            logger.error("Failed to append to sheet file %s: %s", self.path, str(e))
            raise StorageError(
                message=f"Could not write to {self.sheet_name}",
                context={"path": str(self.path), "os_error": str(e)},
            ) from e

        logger.debug("Appended row to %s", self.path.name)

    async def _ends_with_newline(self) -> bool:
        if (await aiofiles.os.stat(self.path)).st_size == 0:
            return True
        async with aiofiles.open(self.path, "rb") as f:
            await f.seek(-1, io.SEEK_END)
            last = await f.read(1)
        return last in (b"\n", b"\r")
