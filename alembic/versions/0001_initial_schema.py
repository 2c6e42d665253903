"""Create students and ledger_entries tables.

Revision ID: 0001_initial
Revises:
Create Date: 2026-09-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the roster and ledger collections with their primary lookups."""
    op.create_table(
        "students",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("student_id", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("grade", sa.String(50), nullable=False),
        sa.Column("gender", sa.String(50), nullable=False, server_default=""),
        sa.Column("course", sa.String(255), nullable=False, server_default=""),
        sa.Column("is_signed_out", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sign_out_time", sa.DateTime(), nullable=True),
        sa.Column("sign_out_destination", sa.String(100), nullable=True),
        sa.Column("sign_out_reason", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_students_student_id", "students", ["student_id"], unique=True)

    op.create_table(
        "ledger_entries",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("student_id", sa.String(100), nullable=False),
        sa.Column("student_name", sa.String(255), nullable=False, server_default=""),
        sa.Column(
            "type",
            sa.Enum("signout", "signin", name="ledger_entry_type"),
            nullable=False,
        ),
        sa.Column("destination", sa.String(100), nullable=False, server_default=""),
        sa.Column("reason", sa.Text(), nullable=False, server_default=""),
        sa.Column("override", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
    )
    op.create_index("ix_ledger_entries_student_id", "ledger_entries", ["student_id"])
    op.create_index("ix_ledger_entries_timestamp", "ledger_entries", ["timestamp"])


def downgrade() -> None:
    """Drop both collections."""
    op.drop_index("ix_ledger_entries_timestamp", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_student_id", table_name="ledger_entries")
    op.drop_table("ledger_entries")
    sa.Enum(name="ledger_entry_type").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_students_student_id", table_name="students")
    op.drop_table("students")
