"""Dashboard service: read-only aggregates over roster and ledger."""

from datetime import datetime

from hallpass.schemas.dashboard import DashboardStats, StudentPassCount
from hallpass.schemas.ledger import LedgerEntryRecord
from hallpass.schemas.signout import ActiveSignout
from hallpass.services.period import now_local, to_local
from hallpass.services.quota import QuotaPolicy
from hallpass.services.store import SignoutStore


class DashboardService:
    """Dashboard data aggregation service."""

    def __init__(self, store: SignoutStore, quota: QuotaPolicy):
        self.store = store
        self.quota = quota

    def get_stats(self, now: datetime | None = None) -> DashboardStats:
        now = to_local(now) if now else now_local()
        students = self.store.get_all_students()
        signed_out = [s for s in students if s.is_signed_out]
        monitored_out = [
            s for s in signed_out if s.sign_out_destination == self.quota.monitored_destination
        ]
        return DashboardStats(
            total_students=len(students),
            signed_out=len(signed_out),
            monitored_destination=self.quota.monitored_destination,
            monitored_out=len(monitored_out),
            quota_threshold=self.quota.threshold,
            period=self.quota.current_period(now),
        )

    def get_currently_out(self, now: datetime | None = None) -> list[ActiveSignout]:
        """Signed-out students by name, with whole minutes since sign-out."""
        now = to_local(now) if now else now_local()
        out = sorted(self.store.get_active_signouts(), key=lambda s: s.name.lower())
        rows = []
        for student in out:
            minutes = 0
            if student.sign_out_time:
                minutes = max(0, int((now - student.sign_out_time).total_seconds() // 60))
            rows.append(ActiveSignout(student=student, minutes_out=minutes))
        return rows

    def get_pass_count(self, student_id: str, now: datetime | None = None) -> StudentPassCount:
        now = to_local(now) if now else now_local()
        student = self.store.get_student_by_natural_id(student_id)
        count, _ = self.quota.count_passes(student.student_id, now)
        return StudentPassCount(
            student_id=student.student_id,
            pass_count=count,
            quota_threshold=self.quota.threshold,
            remaining=max(0, self.quota.threshold - count),
        )

    def get_recent(self, limit: int) -> list[LedgerEntryRecord]:
        return self.store.get_recent_ledger_entries(limit)
