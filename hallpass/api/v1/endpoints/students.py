"""Roster endpoints."""

from io import BytesIO

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import StreamingResponse

from hallpass.core.dependencies import AdminContext, SessionContext
from hallpass.core.exceptions import NotFoundError, UploadError
from hallpass.schemas.common import MessageResponse
from hallpass.schemas.student import (
    ColumnMapping,
    DetectColumnsRequest,
    StudentImportRequest,
    StudentImportResult,
    StudentInput,
    StudentRecord,
)
from hallpass.services.importer import (
    auto_detect_columns,
    generate_template,
    parse_upload,
    require_mapped_columns,
)

router = APIRouter()


@router.get("", response_model=list[StudentRecord])
def list_students(session: SessionContext):
    """List every student, sorted by name."""
    return session.roster.list_students()


@router.post("", response_model=StudentRecord)
def create_student(request: StudentInput, session: AdminContext):
    """Add a student to the roster."""
    return session.roster.create_or_update(request.model_copy(update={"id": None}))


@router.get("/template")
def download_student_template():
    """Download Excel template for roster import."""
    content = generate_template()
    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=roster_template.xlsx"},
    )


@router.post("/detect-columns", response_model=ColumnMapping)
def detect_columns(request: DetectColumnsRequest):
    """Guess column indexes for each roster field from a header row."""
    return auto_detect_columns(request.headers)


@router.post("/import", response_model=StudentImportResult)
def import_students(request: StudentImportRequest, session: SessionContext):
    """Import already-parsed rows using an explicit column mapping.

    Invalid rows are skipped and reported; valid rows are saved.
    """
    require_mapped_columns(request.column_mapping)
    return session.roster.bulk_import(request.rows, request.column_mapping, request.skip_count)


@router.post("/upload", response_model=StudentImportResult)
def upload_students(session: SessionContext, file: UploadFile = File(...)):
    """
    Import a roster from a .csv or .xlsx file.

    The first row must be a header row; columns are auto-detected from it.
    """
    settings = session.settings
    if not file.filename:
        raise UploadError("No file provided")

    if not any(file.filename.lower().endswith(ext) for ext in settings.ALLOWED_EXTENSIONS):
        raise UploadError(
            f"Only {', '.join(settings.ALLOWED_EXTENSIONS)} files are allowed",
            details={"file_name": file.filename},
        )

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")

    rows = parse_upload(content, file.filename)
    mapping = auto_detect_columns(rows[0])
    require_mapped_columns(mapping)
    return session.roster.bulk_import(rows, mapping, skip_count=1)


@router.get("/by-student-id/{student_id}", response_model=StudentRecord)
def get_student_by_student_id(student_id: str, session: SessionContext):
    """Look a student up by school-issued id."""
    return session.store.get_student_by_natural_id(student_id)


@router.put("/{internal_id}", response_model=StudentRecord)
def update_student(internal_id: str, request: StudentInput, session: AdminContext):
    """Edit a student's roster fields."""
    return session.roster.create_or_update(request.model_copy(update={"id": internal_id}))


@router.delete("/{internal_id}", response_model=MessageResponse)
def delete_student(internal_id: str, session: AdminContext):
    """Delete a student. Their ledger history is kept."""
    if not session.roster.delete(internal_id):
        raise NotFoundError("Student", internal_id)
    return MessageResponse(message="Student deleted successfully")
