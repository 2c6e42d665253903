"""FastAPI dependency injection utilities."""

import hmac
import logging
import threading
from typing import Annotated

from fastapi import Depends, Request

from hallpass.core.config import Settings
from hallpass.core.exceptions import PermissionDeniedError, StorageError
from hallpass.schemas.signout import PendingOverride
from hallpass.services.dashboard import DashboardService
from hallpass.services.quota import QuotaPolicy
from hallpass.services.roster import RosterManager
from hallpass.services.scanner import ScannerService
from hallpass.services.signout import SignoutMachine
from hallpass.services.store import SignoutStore

logger = logging.getLogger(__name__)


class AppSession:
    """Application-wide session: services, admin flag and pending override.

    One instance is built at startup and shared by every request.
    """

    def __init__(self, store: SignoutStore, settings: Settings):
        self.settings = settings
        self.store = store
        self.quota = QuotaPolicy(store, settings)
        self.machine = SignoutMachine(store, self.quota, settings)
        self.roster = RosterManager(store)
        self.dashboard = DashboardService(store, self.quota)
        self.scanner = ScannerService(store, self.machine, settings)
        self._is_admin = settings.ADMIN_MODE
        self._lock = threading.Lock()

    @property
    def is_admin(self) -> bool:
        return self._is_admin

    @property
    def pending_override(self) -> PendingOverride | None:
        return self.machine.pending

    def login(self, password: str) -> bool:
        """Enter admin mode when ``password`` matches the admin password."""
        ok = hmac.compare_digest(
            (password or "").encode("utf-8"),
            self.settings.ADMIN_PASSWORD.encode("utf-8"),
        )
        if not ok:
            logger.warning("Failed admin login")
            return False
        with self._lock:
            self._is_admin = True
        logger.info("Admin mode enabled")
        return True

    def logout(self) -> None:
        with self._lock:
            self._is_admin = False
        logger.info("Admin mode disabled")


def get_app_session(request: Request) -> AppSession:
    """Fetch the application session created in the lifespan."""
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise StorageError("Storage is not initialized. Reload the application.")
    return session


def require_admin(
    session: Annotated[AppSession, Depends(get_app_session)],
) -> AppSession:
    """Dependency that requires admin mode."""
    if not session.is_admin:
        raise PermissionDeniedError()
    return session


# Type aliases for dependency injection
SessionContext = Annotated[AppSession, Depends(get_app_session)]
AdminContext = Annotated[AppSession, Depends(require_admin)]
