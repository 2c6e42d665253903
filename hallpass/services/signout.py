"""Sign-out / sign-in state machine with teacher override."""

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from hallpass.core.config import Settings
from hallpass.core.exceptions import (
    InvalidTransitionError,
    NoPendingOverrideError,
    NotFoundError,
    OverridePinMismatchError,
    ValidationError,
)
from hallpass.models.ledger import LedgerEntryType
from hallpass.schemas.ledger import LedgerEntryRecord
from hallpass.schemas.signout import PendingOverride, SignInOutcome, SignOutOutcome
from hallpass.schemas.student import StudentRecord
from hallpass.services.period import now_local, to_local
from hallpass.services.quota import QuotaPolicy
from hallpass.services.store import SignoutStore

logger = logging.getLogger(__name__)

SIGN_IN_REASON = "Sign In"


class SignoutMachine:
    """Drives each student between IN and OUT.

    A monitored sign-out over quota is parked as the single pending override
    until the teacher PIN is supplied or the attempt is cancelled. Transitions
    are serialized: one completes, store writes included, before the next
    starts.
    """

    def __init__(
        self,
        store: SignoutStore,
        quota: QuotaPolicy,
        settings: Settings,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self.store = store
        self.quota = quota
        self.override_pin = settings.TEACHER_OVERRIDE_PIN
        self._clock = clock
        self._pending: PendingOverride | None = None
        self._lock = threading.RLock()

    def _now(self, now: datetime | None) -> datetime:
        return to_local(now) if now is not None else self._clock()

    @property
    def pending(self) -> PendingOverride | None:
        with self._lock:
            return self._pending.model_copy(deep=True) if self._pending else None

    def sign_out(
        self,
        student_id: str,
        destination: str,
        reason: str = "",
        *,
        now: datetime | None = None,
    ) -> SignOutOutcome:
        destination = (destination or "").strip()
        if not destination:
            raise ValidationError("Destination is required", details={"missing_fields": ["destination"]})
        reason = reason or ""

        with self._lock:
            now = self._now(now)
            student = self.store.get_student_by_natural_id(student_id)
            if student.is_signed_out:
                raise InvalidTransitionError(f"{student.name} is already signed out.", state="OUT")

            check = self.quota.check_quota(student, destination, now)
            if not check.allowed:
                replaced = None
                if self._pending is not None:
                    replaced = self._pending.student.student_id
                    logger.warning(
                        "Pending override for %s abandoned by new attempt for %s",
                        replaced,
                        student.student_id,
                    )
                self._pending = PendingOverride(
                    student=student,
                    destination=destination,
                    reason=reason,
                    pass_count=check.pass_count,
                    requested_at=now,
                )
                return SignOutOutcome(
                    status="override_required",
                    student=student,
                    pending=self._pending.model_copy(deep=True),
                    replaced_pending=replaced,
                )

            if self._pending is not None and self._pending.student.student_id == student.student_id:
                self._pending = None

            student, entry = self._commit_sign_out(student, destination, reason, override=False, now=now)
            return SignOutOutcome(status="signed_out", student=student, entry=entry)

    def confirm_override(self, pin: str, *, now: datetime | None = None) -> SignOutOutcome:
        """Commit the pending sign-out if ``pin`` matches the teacher PIN."""
        with self._lock:
            if self._pending is None:
                raise NoPendingOverrideError()

            pending = self._pending
            if (pin or "") != self.override_pin:
                logger.warning("Incorrect override PIN for %s", pending.student.student_id)
                raise OverridePinMismatchError(pending.student.student_id)

            try:
                student = self.store.get_student_by_natural_id(pending.student.student_id)
            except NotFoundError:
                self._pending = None
                raise
            if student.is_signed_out:
                self._pending = None
                raise InvalidTransitionError(f"{student.name} is already signed out.", state="OUT")

            student, entry = self._commit_sign_out(
                student,
                pending.destination,
                pending.reason,
                override=True,
                now=self._now(now),
            )
            self._pending = None
            logger.info("Override granted for %s (%s)", student.student_id, entry.destination)
            return SignOutOutcome(status="signed_out", student=student, entry=entry)

    def cancel_override(self) -> PendingOverride | None:
        """Drop the pending override without writing anything."""
        with self._lock:
            pending, self._pending = self._pending, None
            if pending:
                logger.info("Pending override for %s cancelled", pending.student.student_id)
            return pending

    def sign_in(self, student_id: str, *, now: datetime | None = None) -> SignInOutcome:
        with self._lock:
            now = self._now(now)
            student = self.store.get_student_by_natural_id(student_id)
            if not student.is_signed_out:
                raise InvalidTransitionError(f"{student.name} is already signed in.", state="IN")

            updated = student.model_copy(
                update={
                    "is_signed_out": False,
                    "sign_out_time": None,
                    "sign_out_destination": None,
                    "sign_out_reason": "",
                    "updated_at": now,
                }
            )
            entry = self._entry(student, LedgerEntryType.SIGNIN, "", SIGN_IN_REASON, False, now)
            saved, saved_entry = self.store.commit_transition(updated, entry)
            logger.info("%s signed in", saved.student_id)
            return SignInOutcome(student=saved, entry=saved_entry)

    def toggle(self, student_id: str, destination: str, reason: str = "") -> SignOutOutcome | SignInOutcome:
        """Sign an OUT student in, or attempt to sign an IN student out."""
        with self._lock:
            student = self.store.get_student_by_natural_id(student_id)
            if student.is_signed_out:
                return self.sign_in(student_id)
            return self.sign_out(student_id, destination, reason)

    @staticmethod
    def _entry(
        student: StudentRecord,
        entry_type: LedgerEntryType,
        destination: str,
        reason: str,
        override: bool,
        now: datetime,
    ) -> LedgerEntryRecord:
        return LedgerEntryRecord(
            student_id=student.student_id,
            student_name=student.name,
            type=entry_type,
            destination=destination,
            reason=reason,
            override=override,
            timestamp=now,
            date=now.date(),
        )

    def _commit_sign_out(
        self,
        student: StudentRecord,
        destination: str,
        reason: str,
        *,
        override: bool,
        now: datetime,
    ) -> tuple[StudentRecord, LedgerEntryRecord]:
        updated = student.model_copy(
            update={
                "is_signed_out": True,
                "sign_out_time": now,
                "sign_out_destination": destination,
                "sign_out_reason": reason,
                "updated_at": now,
            }
        )
        entry = self._entry(student, LedgerEntryType.SIGNOUT, destination, reason, override, now)
        saved, saved_entry = self.store.commit_transition(updated, entry)
        logger.info(
            "%s signed out to %s%s",
            saved.student_id,
            destination,
            " [override]" if override else "",
        )
        return saved, saved_entry
