"""
Map Notes Backend — Sheet SQLAlchemy Models
=============================================

What:  ORM models that store spreadsheet-style sheets in a relational database.
Why:   The notes were designed around a spreadsheet: named sheets, ordered
       rows, four positional columns, an optional header row stored as an
       ordinary row. These tables keep that model so the handlers behave the
       same on every backend.

Table Design:
    sheets      one row per named sheet ("Sheet1" is seeded by migration 001)
    sheet_rows  one row per sheet row; column_a..column_d are the cells
                (Address, Name, Note, Timestamp). Cells are nullable because
                legacy rows may be short. Row order is the autoincrement id.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mapnotes.database import Base

# SQLite only autoincrements a column declared exactly INTEGER PRIMARY KEY.
RowId = BigInteger().with_variant(Integer(), "sqlite")


class Sheet(Base):
    """A named table inside the workbook."""

    __tablename__ = "sheets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Sheet name, e.g. Sheet1",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    rows: Mapped[List["SheetRow"]] = relationship(back_populates="sheet", lazy="noload")

    def __repr__(self) -> str:
        return f"<Sheet(id={self.id}, name='{self.name}')>"


class SheetRow(Base):
    """
    One row of a sheet.

    Rows are only ever inserted: notes are immutable and there is no
    update or delete path.
    """

    __tablename__ = "sheet_rows"

    id: Mapped[int] = mapped_column(RowId, primary_key=True, autoincrement=True)
    sheet_id: Mapped[int] = mapped_column(
        ForeignKey("sheets.id", ondelete="CASCADE"),
        nullable=False,
    )

    column_a: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Address")
    column_b: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Name")
    column_c: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Note")
    column_d: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="Timestamp")

    appended_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    sheet: Mapped[Sheet] = relationship(back_populates="rows")

    __table_args__ = (
        Index("idx_sheet_rows_sheet_id_id", "sheet_id", "id"),
    )

    CELL_COLUMNS = ("column_a", "column_b", "column_c", "column_d")

    @property
    def cells(self) -> List[Optional[str]]:
        return [getattr(self, column) for column in self.CELL_COLUMNS]

    def __repr__(self) -> str:
        return f"<SheetRow(id={self.id}, sheet_id={self.sheet_id})>"
