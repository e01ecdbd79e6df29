"""Create sheets and sheet_rows tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the tables behind the database table backend and seeds the
       default sheet "Sheet1" (empty: the first note written adds the header).
Rollback: downgrade() drops both tables (all notes are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_SHEET = "Sheet1"


def upgrade() -> None:
    sheets = op.create_table(
        "sheets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False, comment="Sheet name, e.g. Sheet1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "sheet_rows",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("sheet_id", sa.Integer(), nullable=False),
        sa.Column("column_a", sa.Text(), nullable=True, comment="Address"),
        sa.Column("column_b", sa.Text(), nullable=True, comment="Name"),
        sa.Column("column_c", sa.Text(), nullable=True, comment="Note"),
        sa.Column("column_d", sa.Text(), nullable=True, comment="Timestamp"),
        sa.Column(
            "appended_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sheet_id"], ["sheets.id"], ondelete="CASCADE"),
    )

    # Rows of one sheet in append order: the only query shape the handlers use.
    op.create_index("idx_sheet_rows_sheet_id_id", "sheet_rows", ["sheet_id", "id"])

    op.bulk_insert(sheets, [{"name": DEFAULT_SHEET}])


def downgrade() -> None:
    op.drop_index("idx_sheet_rows_sheet_id_id", table_name="sheet_rows")
    op.drop_table("sheet_rows")
    op.drop_table("sheets")
