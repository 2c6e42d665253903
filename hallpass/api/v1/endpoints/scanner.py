"""Barcode/badge scanner endpoint."""

from fastapi import APIRouter

from hallpass.core.dependencies import SessionContext
from hallpass.schemas.scanner import ScanRequest, ScanResult

router = APIRouter()


@router.post("/scan", response_model=ScanResult)
def scan(request: ScanRequest, session: SessionContext):
    """Select or toggle the scanned student depending on ``SCANNER_MODE``."""
    return session.scanner.handle_scan(request.scanned_id)
