"""Sign-out, sign-in and teacher override endpoints."""

from fastapi import APIRouter

from hallpass.core.dependencies import SessionContext
from hallpass.schemas.signout import (
    ActiveSignout,
    OverrideConfirmRequest,
    PendingOverride,
    SignInOutcome,
    SignInRequest,
    SignOutOutcome,
    SignOutRequest,
)

router = APIRouter()


@router.post("/signouts", response_model=SignOutOutcome)
def sign_out(request: SignOutRequest, session: SessionContext):
    """
    Sign a student out.

    Returns ``status="override_required"`` when the student has used up their
    passes to the monitored destination this period; confirm with the teacher
    PIN through ``POST /signouts/override``.
    """
    return session.machine.sign_out(request.student_id, request.destination, request.reason)


@router.get("/signouts/active", response_model=list[ActiveSignout])
def list_active_signouts(session: SessionContext):
    """Students currently out, by name, with minutes out."""
    return session.dashboard.get_currently_out()


@router.get("/signouts/pending", response_model=PendingOverride | None)
def get_pending_override(session: SessionContext):
    """The sign-out waiting for a teacher PIN, if any."""
    return session.pending_override


@router.post("/signouts/override", response_model=SignOutOutcome)
def confirm_override(request: OverrideConfirmRequest, session: SessionContext):
    """Commit the pending sign-out with the teacher PIN."""
    return session.machine.confirm_override(request.pin)


@router.delete("/signouts/override", response_model=PendingOverride | None)
def cancel_override(session: SessionContext):
    """Discard the pending sign-out; returns what was discarded."""
    return session.machine.cancel_override()


@router.post("/signins", response_model=SignInOutcome)
def sign_in(request: SignInRequest, session: SessionContext):
    """Sign a student back in."""
    return session.machine.sign_in(request.student_id)
