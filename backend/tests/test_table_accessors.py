"""
Map Notes Backend — Table Accessor Tests
==========================================

What:  Contract tests for the CSV, database and memory sheet backends.
How:   CSV runs in a temporary workbook directory; the database accessor
       runs on a throwaway SQLite file (see db_session_factory in conftest.py).

What we test:
    ✅ Rows come back in append order, including legacy short rows
    ✅ row_count ignores trailing blank rows
    ✅ A missing sheet raises SheetNotFoundError, sheet_exists() says False
    ✅ NoteService works end-to-end on each backend
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from mapnotes.exceptions import SheetNotFoundError, StorageError
from mapnotes.models.sheet import SheetRow
from mapnotes.services.csv_table import CsvTableAccessor
from mapnotes.services.database_table import DatabaseTableAccessor
from mapnotes.services.memory_table import MemoryTableAccessor
from mapnotes.services.note_service import NoteService
from mapnotes.services.table_base import HEADER_ROW


class TestMemoryTable:

    @pytest.mark.asyncio
    async def test_row_count_ignores_trailing_blank_rows(self):
        table = MemoryTableAccessor("Sheet1", rows=[["a", "b"], ["", None], []])
        assert await table.row_count() == 1

    @pytest.mark.asyncio
    async def test_read_rows_returns_copies(self):
        table = MemoryTableAccessor("Sheet1", rows=[["a"]])
        rows = await table.read_rows()
        rows[0].append("mutated")
        assert table.rows == [["a"]]

    @pytest.mark.asyncio
    async def test_missing_sheet(self, missing_table):
        assert await missing_table.sheet_exists() is False
        with pytest.raises(SheetNotFoundError):
            await missing_table.append_row(["a", "b", "c", "d"])


class TestCsvTable:

    @pytest.mark.asyncio
    async def test_append_and_read(self, csv_workbook):
        table = CsvTableAccessor("Sheet1", workbook_dir=str(csv_workbook))

        await table.append_row(HEADER_ROW)
        await table.append_row(["12 Bay Rd", "Eve", 'Said "hi", waved', "t1"])

        assert await table.read_rows() == [
            list(HEADER_ROW),
            ["12 Bay Rd", "Eve", 'Said "hi", waved', "t1"],
        ]
        assert await table.row_count() == 2

    @pytest.mark.asyncio
    async def test_multiline_note_survives(self, csv_workbook):
        table = CsvTableAccessor("Sheet1", workbook_dir=str(csv_workbook))
        await table.append_row(["1 Elm St", "Ann", "line one\nline two", "t"])

        rows = await table.read_rows()
        assert rows[0][2] == "line one\nline two"

    @pytest.mark.asyncio
    async def test_append_after_file_without_trailing_newline(self, csv_workbook):
        (csv_workbook / "Sheet1.csv").write_text("Address,Name,Note,Timestamp", encoding="utf-8")
        table = CsvTableAccessor("Sheet1", workbook_dir=str(csv_workbook))

        await table.append_row(["1 Elm St", "Ann", "x", "t"])

        rows = await table.read_rows()
        assert rows == [list(HEADER_ROW), ["1 Elm St", "Ann", "x", "t"]]

    @pytest.mark.asyncio
    async def test_empty_file_has_zero_rows(self, csv_workbook):
        table = CsvTableAccessor("Sheet1", workbook_dir=str(csv_workbook))
        assert await table.read_rows() == []
        assert await table.row_count() == 0

    @pytest.mark.asyncio
    async def test_missing_file_is_missing_sheet(self, tmp_path):
        table = CsvTableAccessor("Sheet1", workbook_dir=str(tmp_path))

        assert await table.sheet_exists() is False
        with pytest.raises(SheetNotFoundError, match="Sheet1 not found"):
            await table.read_rows()
        with pytest.raises(SheetNotFoundError):
            await table.append_row(["a", "b", "c", "d"])
        assert not (tmp_path / "Sheet1.csv").exists()

    @pytest.mark.asyncio
    async def test_read_error_raises_storage_error(self, csv_workbook):
        table = CsvTableAccessor("Sheet1", workbook_dir=str(csv_workbook))

        with patch("mapnotes.services.csv_table.aiofiles.open", side_effect=PermissionError("denied")):
            with pytest.raises(StorageError, match="Could not read Sheet1"):
                await table.read_rows()

    @pytest.mark.asyncio
    async def test_sheet_checks_go_through_aiofiles(self, csv_workbook):
        table = CsvTableAccessor("Sheet1", workbook_dir=str(csv_workbook))

        with patch(
            "mapnotes.services.csv_table.aiofiles.os.path.isfile",
            AsyncMock(return_value=False),
        ) as mock_isfile:
            assert await table.sheet_exists() is False
            with pytest.raises(SheetNotFoundError):
                await table.append_row(["a", "b", "c", "d"])

        assert mock_isfile.await_count == 2
        assert (csv_workbook / "Sheet1.csv").read_text(encoding="utf-8") == ""

    @pytest.mark.asyncio
    async def test_note_service_on_csv(self, csv_workbook):
        table = CsvTableAccessor("Sheet1", workbook_dir=str(csv_workbook))
        service = NoteService()

        added = await service.add_note(
            table, json.dumps({"address": "7 Hill St", "name": "Fay", "note": "Porch light"}),
        )

        content = (csv_workbook / "Sheet1.csv").read_text(encoding="utf-8")
        assert content.splitlines()[0] == "Address,Name,Note,Timestamp"
        assert await service.list_notes(table) == [added]


class TestDatabaseTable:

    @pytest.mark.asyncio
    async def test_append_and_read_in_order(self, db_session_factory):
        async with db_session_factory() as session:
            table = DatabaseTableAccessor(session, "Sheet1")
            await table.append_row(HEADER_ROW)
            await table.append_row(["1 Elm St", "Ann", "x", "t1"])
            await table.append_row(["2 Elm St", "Bo", "y", "t2"])

        async with db_session_factory() as session:
            table = DatabaseTableAccessor(session, "Sheet1")
            rows = await table.read_rows()

        assert rows == [
            list(HEADER_ROW),
            ["1 Elm St", "Ann", "x", "t1"],
            ["2 Elm St", "Bo", "y", "t2"],
        ]

    @pytest.mark.asyncio
    async def test_short_rows_read_back_with_none(self, db_session_factory):
        async with db_session_factory() as session:
            table = DatabaseTableAccessor(session, "Sheet1")
            await table.append_row(["1 Elm St"])
            assert await table.read_rows() == [["1 Elm St", None, None, None]]

    @pytest.mark.asyncio
    async def test_row_count(self, db_session_factory):
        async with db_session_factory() as session:
            table = DatabaseTableAccessor(session, "Sheet1")
            assert await table.row_count() == 0

            await table.append_row(["", "", "", ""])
            assert await table.row_count() == 0

            await table.append_row(["a", "b", "c", "d"])
            await table.append_row(["", "", "", ""])
            assert await table.row_count() == 2

    @pytest.mark.asyncio
    async def test_unknown_sheet(self, db_session_factory):
        async with db_session_factory() as session:
            table = DatabaseTableAccessor(session, "Sheet2")

            assert await table.sheet_exists() is False
            with pytest.raises(SheetNotFoundError, match="Sheet2 not found"):
                await table.read_rows()
            with pytest.raises(SheetNotFoundError):
                await table.append_row(["a", "b", "c", "d"])

    @pytest.mark.asyncio
    async def test_sheets_are_isolated(self, db_session_factory):
        from mapnotes.models.sheet import Sheet

        async with db_session_factory() as session:
            session.add(Sheet(name="Archive"))
            await session.commit()

            await DatabaseTableAccessor(session, "Archive").append_row(["old", "x", "y", "z"])
            assert await DatabaseTableAccessor(session, "Sheet1").read_rows() == []

    @pytest.mark.asyncio
    async def test_note_service_on_database(self, db_session_factory):
        service = NoteService()

        async with db_session_factory() as session:
            added = await service.add_note(
                DatabaseTableAccessor(session, "Sheet1"),
                json.dumps({"address": "123 Main St", "name": "Alice", "note": "Nice porch"}),
            )

        async with db_session_factory() as session:
            table = DatabaseTableAccessor(session, "Sheet1")
            assert await service.list_notes(table) == [added]
            assert await table.row_count() == 2

    def test_cells_property_orders_columns(self):
        row = SheetRow(column_a="A", column_b="B", column_c=None, column_d="D")
        assert row.cells == ["A", "B", None, "D"]
