"""Pass quota policy for the monitored destination."""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from hallpass.core.config import Settings
from hallpass.models.ledger import LedgerEntryType
from hallpass.schemas.period import GradingPeriod
from hallpass.schemas.student import StudentRecord
from hallpass.services.period import period_for
from hallpass.services.store import SignoutStore

logger = logging.getLogger(__name__)


class QuotaDecision(str, enum.Enum):
    """Outcome of a quota check."""

    ALLOW = "allow"
    REQUIRE_OVERRIDE = "require_override"


@dataclass(frozen=True)
class QuotaCheck:
    decision: QuotaDecision
    pass_count: int
    threshold: int
    period: GradingPeriod | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is QuotaDecision.ALLOW


class QuotaPolicy:
    """Counts prior monitored-destination sign-outs in the current period.

    Counts are read fresh from the ledger on every check; nothing is cached.
    """

    def __init__(self, store: SignoutStore, settings: Settings):
        self.store = store
        self.monitored_destination = settings.MONITORED_DESTINATION
        self.threshold = settings.QUOTA_THRESHOLD
        self.explicit_periods = settings.GRADING_PERIODS

    def is_monitored(self, destination: str) -> bool:
        return destination == self.monitored_destination

    def current_period(self, now: datetime) -> GradingPeriod:
        return period_for(now, self.explicit_periods)

    def count_passes(self, student_id: str, now: datetime) -> tuple[int, GradingPeriod]:
        """Monitored-destination sign-outs for ``student_id`` in the period of ``now``."""
        period = self.current_period(now)
        entries = self.store.get_ledger_entries_for_student_in_range(
            student_id,
            period.start_inclusive,
            period.end_inclusive,
        )
        count = sum(
            1
            for e in entries
            if e.type == LedgerEntryType.SIGNOUT and e.destination == self.monitored_destination
        )
        return count, period

    def check_quota(self, student: StudentRecord, destination: str, now: datetime) -> QuotaCheck:
        if not self.is_monitored(destination):
            return QuotaCheck(QuotaDecision.ALLOW, pass_count=0, threshold=self.threshold)

        count, period = self.count_passes(student.student_id, now)
        if count >= self.threshold:
            logger.warning(
                "Quota reached for %s: %d %s passes in %s",
                student.student_id,
                count,
                destination,
                period.label,
            )
            return QuotaCheck(QuotaDecision.REQUIRE_OVERRIDE, count, self.threshold, period)
        return QuotaCheck(QuotaDecision.ALLOW, count, self.threshold, period)
