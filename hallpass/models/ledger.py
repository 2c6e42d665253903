"""Sign-out ledger model."""

import enum
import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hallpass.core.database import Base
from hallpass.models.base import IDMixin


class LedgerEntryType(str, enum.Enum):
    """Kind of transition recorded in the ledger."""

    SIGNOUT = "signout"
    SIGNIN = "signin"


class LedgerEntry(Base, IDMixin):
    """Append-only record of one sign-out or sign-in.

    ``student_id`` is the natural key with no foreign key; entries outlive
    the roster record they refer to.
    """

    __tablename__ = "ledger_entries"

    student_id: Mapped[str] = mapped_column(String(100), nullable=False)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    type: Mapped[LedgerEntryType] = mapped_column(
        Enum(
            LedgerEntryType,
            name="ledger_entry_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    destination: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timestamp: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        Index("ix_ledger_entries_student_id", "student_id"),
        Index("ix_ledger_entries_timestamp", "timestamp"),
        Index("ix_ledger_entries_date", "date"),
        Index("ix_ledger_entries_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<LedgerEntry(id={self.id}, student_id={self.student_id}, type={self.type})>"
