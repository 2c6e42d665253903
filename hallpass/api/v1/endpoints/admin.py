"""Admin mode endpoints."""

from fastapi import APIRouter

from hallpass.core.dependencies import AdminContext, SessionContext
from hallpass.core.exceptions import PermissionDeniedError
from hallpass.schemas.admin import AdminLoginRequest, AdminStatus
from hallpass.schemas.common import MessageResponse

router = APIRouter()


@router.get("/status", response_model=AdminStatus)
def admin_status(session: SessionContext):
    return AdminStatus(is_admin=session.is_admin)


@router.post("/login", response_model=AdminStatus)
def admin_login(request: AdminLoginRequest, session: SessionContext):
    """Enter admin mode."""
    if not session.login(request.password):
        raise PermissionDeniedError("Incorrect admin password")
    return AdminStatus(is_admin=True)


@router.post("/logout", response_model=AdminStatus)
def admin_logout(session: SessionContext):
    """Leave admin mode."""
    session.logout()
    return AdminStatus(is_admin=False)


@router.post("/reset", response_model=MessageResponse)
def reset_storage(session: AdminContext):
    """Delete every student and ledger entry."""
    session.store.reset_all()
    session.machine.cancel_override()
    return MessageResponse(message="All students and ledger entries deleted")
