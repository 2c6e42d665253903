"""Ledger endpoints."""

from fastapi import APIRouter, Query

from hallpass.core.dependencies import SessionContext
from hallpass.schemas.ledger import LedgerEntryRecord

router = APIRouter()


@router.get("/recent", response_model=list[LedgerEntryRecord])
def recent_ledger(
    session: SessionContext,
    limit: int | None = Query(None, ge=1, le=1000),
):
    """Newest ledger entries first, including the override flag."""
    return session.dashboard.get_recent(limit or session.settings.RECENT_LEDGER_LIMIT)
