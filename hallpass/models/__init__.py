"""Database models package."""

from hallpass.models.ledger import LedgerEntry, LedgerEntryType
from hallpass.models.student import Student

__all__ = [
    # Roster
    "Student",
    # Ledger
    "LedgerEntry",
    "LedgerEntryType",
]
