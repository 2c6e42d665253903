"""Dashboard schemas."""

from hallpass.schemas.common import BaseSchema
from hallpass.schemas.period import GradingPeriod


class DashboardStats(BaseSchema):
    """Headline counts for the dashboard."""

    total_students: int
    signed_out: int
    monitored_destination: str
    monitored_out: int
    quota_threshold: int
    period: GradingPeriod


class StudentPassCount(BaseSchema):
    """Monitored-destination passes used by one student this period."""

    student_id: str
    pass_count: int
    quota_threshold: int
    remaining: int
