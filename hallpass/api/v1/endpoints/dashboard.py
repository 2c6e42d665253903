"""Dashboard and grading period endpoints."""

from fastapi import APIRouter

from hallpass.core.dependencies import SessionContext
from hallpass.schemas.dashboard import DashboardStats, StudentPassCount
from hallpass.schemas.period import GradingPeriod
from hallpass.services.period import now_local

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(session: SessionContext):
    """Headline counts for the current grading period."""
    return session.dashboard.get_stats()


@router.get("/dashboard/students/{student_id}/passes", response_model=StudentPassCount)
def get_student_passes(student_id: str, session: SessionContext):
    """Monitored-destination passes a student has used this period."""
    return session.dashboard.get_pass_count(student_id)


@router.get("/periods/current", response_model=GradingPeriod)
def get_current_period(session: SessionContext):
    """The grading period containing now."""
    return session.quota.current_period(now_local())


@router.get("/destinations", response_model=list[str])
def list_destinations(session: SessionContext):
    """Destinations offered for sign-out; other free text is still accepted."""
    return session.settings.DESTINATIONS
