"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hallpass.api.v1.router import api_router
from hallpass.core.config import Settings, get_settings
from hallpass.core.dependencies import AppSession
from hallpass.core.exceptions import AppException
from hallpass.middleware.logging import RequestLoggingMiddleware
from hallpass.schemas.common import ErrorDetail, ErrorResponse
from hallpass.services.store import init_store

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if get_settings().DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Suppress noisy SQLAlchemy and other library logs
logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("alembic").setLevel(logging.WARNING)
logging.getLogger("python_multipart").setLevel(logging.WARNING)
logging.getLogger("python_multipart.multipart").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str, details: dict | None = None) -> dict:
    error = ErrorDetail(code=code, message=message, details=details or {})
    return ErrorResponse(error=error).model_dump()


def create_application(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store and build the application session."""
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        try:
            store = init_store(settings.DATABASE_URL, echo=settings.DEBUG)
        except Exception:
            logger.exception("Failed to initialize storage. Reload the application.")
            raise
        app.state.session = AppSession(store, settings)
        yield
        logger.info("Shutting down application")
        app.state.session = None
        store.engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
Hall Pass API - classroom sign-out tracking.

## Features

- **Roster**: Add, edit and import students from CSV or Excel
- **Sign-out / Sign-in**: Every transition is recorded in an append-only ledger
- **Pass Quota**: Monitored-destination passes are limited per grading period
- **Teacher Override**: A PIN lets a student exceed the quota
- **Scanner**: Badge scans select or toggle a student

## Error Handling

All errors follow a standard format:
```json
{
  "success": false,
  "error": {
    "code": "ERROR_CODE",
    "message": "Human readable message",
    "details": {}
  }
}
```
        """,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middlewares
    app.add_middleware(RequestLoggingMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=_error_body(
                "VALIDATION_ERROR",
                "Request validation failed",
                {"errors": jsonable_errors(exc)},
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An internal server error occurred"),
        )

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint for monitoring."""
        session = getattr(request.app.state, "session", None)
        return {
            "status": "healthy" if session is not None else "starting",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "schema_revision": session.store.schema_revision() if session else None,
        }

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-JSON context values turned into strings."""
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


# Create app instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hallpass.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().DEBUG,
    )
