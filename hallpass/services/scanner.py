"""Scan-input handling: resolve a scanned id and select or toggle the student."""

import logging

from hallpass.core.config import Settings
from hallpass.core.exceptions import ValidationError
from hallpass.schemas.scanner import ScanResult
from hallpass.schemas.signout import SignInOutcome
from hallpass.services.signout import SignoutMachine
from hallpass.services.store import SignoutStore

logger = logging.getLogger(__name__)


class ScannerService:
    """``select`` only looks the student up; ``toggle`` also drives the transition."""

    def __init__(self, store: SignoutStore, machine: SignoutMachine, settings: Settings):
        self.store = store
        self.machine = machine
        self.mode = settings.SCANNER_MODE
        self.default_destination = settings.SCANNER_DEFAULT_DESTINATION

    def handle_scan(self, scanned_id: str) -> ScanResult:
        student_id = str(scanned_id or "").strip()
        if not student_id:
            raise ValidationError("Scanned ID is empty", details={"missing_fields": ["scanned_id"]})

        student = self.store.get_student_by_natural_id(student_id)
        logger.info("Scanned %s (mode=%s)", student_id, self.mode)

        if self.mode != "toggle":
            return ScanResult(mode="select", action="selected", student=student)

        outcome = self.machine.toggle(student_id, self.default_destination, "")
        if isinstance(outcome, SignInOutcome):
            return ScanResult(mode="toggle", action="signed_in", student=outcome.student, sign_in=outcome)
        action = "signed_out" if outcome.status == "signed_out" else "override_required"
        return ScanResult(mode="toggle", action=action, student=outcome.student, sign_out=outcome)
