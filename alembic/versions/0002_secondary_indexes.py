"""Add secondary indexes for the sign-out list and day/type queries.

Revision ID: 0002_secondary_indexes
Revises: 0001_initial
Create Date: 2026-09-20

Only indexes are added; existing rows are untouched.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_secondary_indexes"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index("ix_students_is_signed_out", "students", ["is_signed_out"], if_not_exists=True)
    op.create_index("ix_students_name", "students", ["name"], if_not_exists=True)
    op.create_index("ix_ledger_entries_date", "ledger_entries", ["date"], if_not_exists=True)
    op.create_index("ix_ledger_entries_type", "ledger_entries", ["type"], if_not_exists=True)


def downgrade() -> None:
    op.drop_index("ix_ledger_entries_type", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_date", table_name="ledger_entries")
    op.drop_index("ix_students_name", table_name="students")
    op.drop_index("ix_students_is_signed_out", table_name="students")
