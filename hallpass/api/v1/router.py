"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from hallpass.api.v1.endpoints import admin, dashboard, ledger, scanner, signouts, students

api_router = APIRouter()

# Roster
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

# Sign-out / sign-in / override
api_router.include_router(
    signouts.router,
    tags=["Sign-outs"],
)

# Ledger
api_router.include_router(
    ledger.router,
    prefix="/ledger",
    tags=["Ledger"],
)

# Dashboard and periods
api_router.include_router(
    dashboard.router,
    tags=["Dashboard"],
)

# Scanner
api_router.include_router(
    scanner.router,
    prefix="/scanner",
    tags=["Scanner"],
)

# Admin mode
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
)
