"""
Map Notes Backend — Database Table Accessor
=============================================

What:  TableAccessor over the sheets / sheet_rows tables (mapnotes/models/sheet.py).
How:   Request-scoped: wraps the AsyncSession opened for the current request.
       Each append commits immediately, the same way a spreadsheet append is
       saved as soon as it returns.

Query plan:
    read_rows:  SELECT ... FROM sheet_rows WHERE sheet_id = :id ORDER BY id
                → idx_sheet_rows_sheet_id_id
    row_count:  SELECT max(id) of the last row holding any cell, then
                count of rows up to it
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mapnotes.exceptions import SheetNotFoundError, StorageError
from mapnotes.models.sheet import Sheet, SheetRow
from mapnotes.services.table_base import Row, TableAccessor

logger = logging.getLogger(__name__)


def _non_empty(column):
    return (column.is_not(None)) & (column != "")


class DatabaseTableAccessor(TableAccessor):
    """
    Sheet stored as rows of the sheet_rows table.

    The sheet id is looked up once per request and kept on the instance;
    the instance itself never outlives the request.
    """

    backend_name = "database"

    def __init__(self, session: AsyncSession, sheet_name: str):
        super().__init__(sheet_name)
        self.session = session
        self._sheet_id: Optional[int] = None

    async def _lookup_sheet_id(self) -> Optional[int]:
        if self._sheet_id is None:
            try:
                result = await self.session.execute(
                    select(Sheet.id).where(Sheet.name == self.sheet_name)
                )
            except SQLAlchemyError as e:
                raise self._storage_error("look up", e) from e
            self._sheet_id = result.scalar_one_or_none()
        return self._sheet_id

    async def _require_sheet_id(self) -> int:
        sheet_id = await self._lookup_sheet_id()
        if sheet_id is None:
            raise SheetNotFoundError(self.sheet_name)
        return sheet_id

    def _storage_error(self, action: str, error: Exception) -> StorageError:
        logger.error("Database error during %s on sheet %s: %s", action, self.sheet_name, str(error))
        return StorageError(
            message=f"Could not {action} {self.sheet_name}",
            context={"sheet": self.sheet_name, "error_type": type(error).__name__},
        )

    async def sheet_exists(self) -> bool:
        return await self._lookup_sheet_id() is not None

    async def read_rows(self) -> List[Row]:
        sheet_id = await self._require_sheet_id()
        try:
            result = await self.session.execute(
                select(SheetRow)
                .where(SheetRow.sheet_id == sheet_id)
                .order_by(SheetRow.id)
            )
            return [row.cells for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._storage_error("read", e) from e

    async def row_count(self) -> int:
        sheet_id = await self._require_sheet_id()
        try:
            last_id = (
                await self.session.execute(
                    select(func.max(SheetRow.id)).where(
                        SheetRow.sheet_id == sheet_id,
                        or_(*(_non_empty(getattr(SheetRow, c)) for c in SheetRow.CELL_COLUMNS)),
                    )
                )
            ).scalar()
            if last_id is None:
                return 0
            return (
                await self.session.execute(
                    select(func.count(SheetRow.id)).where(
                        SheetRow.sheet_id == sheet_id,
                        SheetRow.id <= last_id,
                    )
                )
            ).scalar() or 0
        except SQLAlchemyError as e:
            raise self._storage_error("count rows of", e) from e

    async def append_row(self, row: Sequence[str]) -> None:
        sheet_id = await self._require_sheet_id()
        cells = list(row)[: len(SheetRow.CELL_COLUMNS)]
        cells += [None] * (len(SheetRow.CELL_COLUMNS) - len(cells))

        record = SheetRow(sheet_id=sheet_id, **dict(zip(SheetRow.CELL_COLUMNS, cells)))
        try:
            self.session.add(record)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._storage_error("append to", e) from e

        logger.debug("Appended row to sheet %s", self.sheet_name)
