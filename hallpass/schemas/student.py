"""Student schemas."""

from datetime import datetime

from pydantic import Field

from hallpass.schemas.common import BaseSchema


class StudentRecord(BaseSchema):
    """Detached copy of a roster record.

    Changing an instance has no effect on stored state until it is saved.
    """

    id: str | None = None
    student_id: str
    name: str
    grade: str
    gender: str = ""
    course: str = ""
    is_signed_out: bool = False
    sign_out_time: datetime | None = None
    sign_out_destination: str | None = None
    sign_out_reason: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def state(self) -> str:
        return "OUT" if self.is_signed_out else "IN"


class StudentInput(BaseSchema):
    """Fields accepted by the add/edit student form.

    Required fields are checked by the roster manager so that every missing
    field can be reported at once.
    """

    id: str | None = Field(None, description="Internal id; set when editing")
    name: str = ""
    student_id: str = ""
    grade: str = ""
    gender: str = ""
    course: str = ""


class ColumnMapping(BaseSchema):
    """Zero-based column index for each roster field (None = unmapped)."""

    name: int | None = Field(None, ge=0)
    student_id: int | None = Field(None, ge=0)
    grade: int | None = Field(None, ge=0)
    gender: int | None = Field(None, ge=0)
    course: int | None = Field(None, ge=0)


class StudentImportRequest(BaseSchema):
    """Rows already parsed by the import collaborator."""

    rows: list[list[str | None]]
    column_mapping: ColumnMapping
    skip_count: int = Field(1, ge=0)


class ImportRowError(BaseSchema):
    """Row-level import failure."""

    row: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


class StudentImportResult(BaseSchema):
    """Result of a best-effort roster import."""

    total_rows: int
    successful_rows: int
    failed_rows: int
    errors: list[ImportRowError] = []
    message: str


class DetectColumnsRequest(BaseSchema):
    """Header row to run column auto-detection on."""

    headers: list[str]
