"""
Map Notes Backend — Abstract Table Accessor Interface
=======================================================

What:  Abstract base class for the tabular store that holds the notes.
Why:   The handlers only need "read every row" and "append one row". Hiding
       the store behind this interface lets the same handlers run against a
       database, a CSV workbook or plain memory.
How:   Concrete accessors inherit from TableAccessor and implement the four
       coroutines below. One accessor instance is bound to one named sheet.
Who:   Injected into NoteService calls by the routes (see table_provider.py).

Sheet semantics every implementation must follow:
    - Rows come back in append order; cells are strings or None.
    - Rows may be shorter than the four note columns (legacy data).
    - append_row() persists the row before returning.
    - A sheet that cannot be located raises SheetNotFoundError from every
      row operation; sheet_exists() answers without raising.
    - Backend failures are raised as StorageError.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

# Column order of the sheet. Also the literal header row written to an empty sheet.
HEADER_ROW = ("Address", "Name", "Note", "Timestamp")

Row = List[Optional[str]]


class TableAccessor(ABC):
    """
    Abstract interface for one named sheet in a tabular store.

    Implementations:
        - DatabaseTableAccessor: SQLAlchemy rows (default)
        - CsvTableAccessor: <sheet>.csv files in a workbook directory
        - MemoryTableAccessor: in-process list (development and tests)
    """

    backend_name: str = "abstract"

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name

    @abstractmethod
    async def sheet_exists(self) -> bool:
        """Return True when the named sheet can be located."""
        ...

    @abstractmethod
    async def read_rows(self) -> List[Row]:
        """
        Return every row of the sheet in order.

        Raises:
            SheetNotFoundError: The sheet does not exist
            StorageError: The backing store failed
        """
        ...

    @abstractmethod
    async def row_count(self) -> int:
        """
        Return the number of rows up to and including the last non-empty row.

        Raises:
            SheetNotFoundError: The sheet does not exist
            StorageError: The backing store failed
        """
        ...

    @abstractmethod
    async def append_row(self, row: Sequence[str]) -> None:
        """
        Append one whole row after the last row and persist it.

        Raises:
            SheetNotFoundError: The sheet does not exist
            StorageError: The backing store failed
        """
        ...


def is_blank_row(row: Sequence[Optional[str]]) -> bool:
    """True when no cell of the row holds a value."""
    return not any(row)
