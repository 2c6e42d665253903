"""Custom exception classes and error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": code,
                    "message": message,
                    "details": details or {},
                },
            },
        )

    def __str__(self) -> str:
        return self.message


class StorageError(AppException):
    """Persistent store could not complete the operation."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="STORAGE_ERROR",
            message=message,
            details=details,
        )


class ValidationError(AppException):
    """Data validation failed."""

    def __init__(
        self,
        message: str = "Validation error",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class DuplicateKeyError(AppException):
    """Natural student identifier already belongs to another student."""

    def __init__(self, student_id: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code="DUPLICATE_KEY",
            message="That Student ID already exists.",
            details={"student_id": student_id},
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
    ):
        details = {}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            message=f"{resource} not found",
            details=details,
        )


class InvalidTransitionError(AppException):
    """Sign-out or sign-in attempted from the wrong state."""

    def __init__(self, message: str, state: str | None = None):
        details = {}
        if state:
            details["state"] = state
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code="INVALID_TRANSITION",
            message=message,
            details=details,
        )


class OverridePinMismatchError(AppException):
    """Teacher PIN did not match; the pending override is kept."""

    def __init__(self, student_id: str | None = None):
        details = {"pending_retained": True}
        if student_id:
            details["student_id"] = student_id
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code="OVERRIDE_PIN_MISMATCH",
            message="Incorrect teacher PIN",
            details=details,
        )


class NoPendingOverrideError(AppException):
    """Override confirmation arrived with nothing pending."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code="NO_PENDING_OVERRIDE",
            message="No sign-out is waiting for a teacher override",
        )


class PermissionDeniedError(AppException):
    """Permission denied for the requested action."""

    def __init__(self, message: str = "Admin mode required"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code="PERMISSION_DENIED",
            message=message,
        )


class UploadError(AppException):
    """File upload failed."""

    def __init__(
        self,
        message: str = "Upload failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="UPLOAD_FAILED",
            message=message,
            details=details,
        )
