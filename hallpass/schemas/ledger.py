"""Ledger schemas."""

import datetime as dt

from hallpass.models.ledger import LedgerEntryType
from hallpass.schemas.common import BaseSchema


class LedgerEntryRecord(BaseSchema):
    """Immutable copy of one ledger entry."""

    id: int | None = None
    student_id: str
    student_name: str = ""
    type: LedgerEntryType
    destination: str = ""
    reason: str = ""
    override: bool = False
    timestamp: dt.datetime
    date: dt.date
